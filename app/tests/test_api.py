"""API endpoint tests"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_db, get_feed_client
from app.main import app
from app.models import Token, TokenEvent

FUN_COIN = "FunCoin111122223333444455556666777788889999"


@pytest.fixture
def client(session_factory, feed):
    """Test client bound to the in-memory store and the fake feed"""

    def override_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_feed_client] = lambda: feed
    yield TestClient(app)
    app.dependency_overrides.clear()


def token_payload(**overrides):
    payload = {
        "name": "Doge Classic",
        "symbol": "DOGEC",
        "slug": "doge-classic",
        "contract_address": "DogeClassic0001",
        "chain": "Solana",
        "description": "hand-curated",
        "events": [{"title": "Launch", "date": "2024-01-01T00:00:00Z", "type": "Launch"}],
    }
    payload.update(overrides)
    return payload


class TestHealthAndStats:
    """Test health and sync observability endpoints"""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"database": "ok", "last_sync_status": None}

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_stats_lists_runs(self, client, feed, graduated_record):
        feed.records = [graduated_record(FUN_COIN, "Fun Coin", 1700000000)]
        client.post("/migrated-tokens/sync")

        response = client.get("/stats")

        assert response.status_code == 200
        runs = response.json()
        assert len(runs) == 1
        assert runs[0]["mode"] == "baseline"
        assert runs[0]["imported"] == 1
        assert client.get("/health").json()["last_sync_status"] == "success"

    def test_watermark_endpoint(self, client, feed, graduated_record):
        assert client.get("/stats/watermark").json() == {"watermark": None, "has_baseline": False}

        feed.records = [graduated_record(FUN_COIN, "Fun Coin", 1700000000)]
        client.post("/migrated-tokens/sync")

        body = client.get("/stats/watermark").json()
        assert body["has_baseline"] is True
        assert body["watermark"].startswith("2023-11-14T22:13:20")

    def test_invalid_endpoint(self, client):
        response = client.get("/invalid")
        assert response.status_code == 404


class TestMigratedTokenRoutes:
    """Test sync triggers and manual import"""

    def test_auto_sync_without_baseline(self, client, feed, graduated_record):
        feed.records = [graduated_record(FUN_COIN, "Fun Coin", 1700000000)]

        response = client.get("/migrated-tokens/auto-sync")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["imported"] == 0
        assert body["checked"] == 1
        assert "skippedExisting" in body
        assert "errorDetails" in body

    def test_baseline_sync_publishes_token(self, client, feed, graduated_record):
        feed.records = [graduated_record(FUN_COIN, "Fun Coin", 1700000000)]

        response = client.post("/migrated-tokens/sync")

        assert response.status_code == 200
        assert response.json()["imported"] == 1
        token = client.get("/tokens/fun-coin").json()
        assert token["symbol"] == "FUN"
        assert token["contract_address"] == FUN_COIN
        assert token["migrated"] is True
        assert client.get("/tokens/migrated").json()["total_count"] == 1

    def test_sync_reports_upstream_failure(self, client, feed):
        feed.unavailable = True

        response = client.get("/migrated-tokens/auto-sync")

        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_import_unknown_address(self, client):
        response = client.post("/migrated-tokens/import", json={"contractAddress": FUN_COIN})
        assert response.status_code == 404

    def test_import_creates_draft(self, client, feed):
        feed.metadata[FUN_COIN] = {"name": "Fun Coin", "symbol": "FUN", "created_timestamp": 1700000000000}

        response = client.post(
            "/migrated-tokens/import", json={"contractAddress": FUN_COIN, "migrationDex": "Raydium"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Token imported successfully"
        assert body["token"]["published"] is False
        assert body["token"]["migration_dex"] == "Raydium"
        # Drafts are hidden from the public catalogue
        assert client.get("/tokens/fun-coin").status_code == 404

    def test_import_requires_address(self, client):
        response = client.post("/migrated-tokens/import", json={})
        assert response.status_code == 422

    def test_import_rejects_blank_address(self, client, feed):
        response = client.post("/migrated-tokens/import", json={"contractAddress": "   "})

        assert response.status_code == 422
        assert feed.metadata_calls == []

    def test_import_with_chain(self, client, feed):
        feed.metadata[FUN_COIN] = {"name": "Fun Coin", "symbol": "FUN"}

        response = client.post(
            "/migrated-tokens/import", json={"contractAddress": f" {FUN_COIN} ", "chain": "Ethereum"}
        )

        assert response.status_code == 200
        assert response.json()["token"]["chain"] == "Ethereum"
        assert response.json()["token"]["contract_address"] == FUN_COIN


class TestAdminRoutes:
    """Test admin CRUD and the migrated-token purge"""

    def test_create_get_update_delete(self, client):
        created = client.post("/admin/tokens", json=token_payload())
        assert created.status_code == 201
        token = created.json()
        assert token["published"] is False
        assert token["events"][0]["title"] == "Launch"

        assert client.get(f"/admin/tokens/{token['id']}").status_code == 200
        assert client.get("/tokens/doge-classic").status_code == 404

        patched = client.patch(f"/admin/tokens/{token['id']}", json={"published": True, "lore": "much wow"})
        assert patched.status_code == 200
        assert patched.json()["lore"] == "much wow"
        assert client.get("/tokens/doge-classic").status_code == 200

        assert client.delete(f"/admin/tokens/{token['id']}").status_code == 204
        assert client.get(f"/admin/tokens/{token['id']}").status_code == 404

    def test_duplicate_slug_rejected(self, client):
        assert client.post("/admin/tokens", json=token_payload()).status_code == 201

        response = client.post("/admin/tokens", json=token_payload(contract_address="Another0001"))

        assert response.status_code == 400

    def test_duplicate_address_rejected(self, client):
        assert client.post("/admin/tokens", json=token_payload()).status_code == 201

        response = client.post("/admin/tokens", json=token_payload(slug="doge-classic-2"))

        assert response.status_code == 400

    def test_unknown_token_id(self, client):
        assert client.get("/admin/tokens/not-a-uuid").status_code == 404
        assert client.patch("/admin/tokens/00000000-0000-0000-0000-000000000000", json={}).status_code == 404

    def test_admin_list_includes_drafts(self, client):
        client.post("/admin/tokens", json=token_payload())

        assert client.get("/admin/tokens").json()["total_count"] == 1
        assert client.get("/admin/tokens?published=false").json()["total_count"] == 1
        assert client.get("/tokens").json()["total_count"] == 0

    def test_purge_removes_only_migrated_pump_tokens(self, client, db, make_token):
        now = datetime.now(timezone.utc)
        migrated = make_token(FUN_COIN, now - timedelta(hours=1), slug="fun-coin")
        migrated.events = [TokenEvent(title="Graduated", date=now, type="Migration")]
        db.commit()
        client.post("/admin/tokens", json=token_payload())

        response = client.delete("/admin/tokens/migrated")

        assert response.status_code == 200
        assert response.json()["deleted"] == 1
        db.expire_all()
        remaining = db.query(Token).all()
        assert [t.slug for t in remaining] == ["doge-classic"]
        assert db.query(TokenEvent).count() == 1
