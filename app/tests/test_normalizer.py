"""Normalizer tests"""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import MissingAddress, ValidationFailure
from app.ingestion.normalizer import (
    TokenRecordNormalizer,
    best_timestamp,
    normalize_telegram,
    normalize_twitter,
    normalize_website,
    slugify,
    to_epoch_seconds,
)

ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestTokenRecordNormalizer:
    """Test conversion of upstream payloads into token drafts"""

    @pytest.fixture
    def normalizer(self):
        return TokenRecordNormalizer(chain="Solana", clock=lambda: FIXED_NOW)

    def test_seconds_and_milliseconds_are_the_same_instant(self, normalizer):
        """1700000000 s and 1700000000000 ms normalize identically"""
        in_seconds = normalizer.normalize({"mint": ADDRESS, "creationTime": 1700000000})
        in_millis = normalizer.normalize({"mint": ADDRESS, "creationTime": 1700000000000})

        assert in_seconds.migration_date == in_millis.migration_date
        assert in_seconds.migration_date == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_address_probed_from_alternate_keys(self, normalizer):
        """coinMint is accepted when mint is absent"""
        draft = normalizer.normalize({"coinMint": ADDRESS, "name": "Fun Coin"})
        assert draft.contract_address == ADDRESS

    def test_address_from_metadata_when_primary_lacks_it(self, normalizer):
        draft = normalizer.normalize({"name": "Fun Coin"}, {"mint": ADDRESS})
        assert draft.contract_address == ADDRESS

    def test_missing_address_raises(self, normalizer):
        with pytest.raises(MissingAddress):
            normalizer.normalize({"name": "Ghost", "symbol": "GHOST", "creationTime": 1700000000})

    def test_missing_name_and_symbol_are_defaulted(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS})

        assert draft.name == f"Token {ADDRESS[:8]}"
        assert draft.symbol == "UNKNOWN"
        assert draft.slug == f"token-{ADDRESS[:8].lower()}"

    def test_metadata_preferred_over_graduated_record(self, normalizer):
        primary = {"mint": ADDRESS, "name": "fun", "symbol": "fn", "creationTime": 1700000000}
        metadata = {"mint": ADDRESS, "name": "Fun Coin", "symbol": "FUN", "image_uri": "https://cdn/fun.png"}

        draft = normalizer.normalize(primary, metadata, "Raydium")

        assert draft.name == "Fun Coin"
        assert draft.symbol == "FUN"
        assert draft.logo_url == "https://cdn/fun.png"
        assert draft.migration_dex == "Raydium"

    def test_nested_metadata_object_is_probed(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "metadata": {"name": "Nested Coin", "symbol": "NEST"}})
        assert draft.name == "Nested Coin"
        assert draft.symbol == "NEST"

    def test_slug_from_name(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "name": "  Fun Coin!! 2.0 "})
        assert draft.slug == "fun-coin-2-0"

    def test_slug_falls_back_to_address_when_name_has_no_alphanumerics(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "name": "🚀🚀🚀"})

        assert draft.name == "🚀🚀🚀"
        assert draft.slug == f"token-{ADDRESS[:8].lower()}"

    def test_explicit_migration_time_wins_over_creation_time(self, normalizer):
        draft = normalizer.normalize(
            {"mint": ADDRESS, "creationTime": 1600000000, "graduatedAt": 1650000000, "migrationTime": 1700000000}
        )
        assert draft.migration_date == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_graduated_list_time_wins_over_metadata_time(self, normalizer):
        draft = normalizer.normalize(
            {"mint": ADDRESS, "creationTime": 1700000000},
            {"mint": ADDRESS, "created_timestamp": 1600000000000},
        )
        assert draft.migration_date == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_iso_string_timestamp(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "graduatedAt": "2024-03-01T10:00:00Z"})
        assert draft.migration_date == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_future_timestamp_clamped_to_now(self, normalizer):
        far_future = (FIXED_NOW + timedelta(days=400)).timestamp()
        draft = normalizer.normalize({"mint": ADDRESS, "creationTime": far_future})
        assert draft.migration_date == FIXED_NOW

    def test_near_future_timestamp_kept(self, normalizer):
        soon = FIXED_NOW + timedelta(days=30)
        draft = normalizer.normalize({"mint": ADDRESS, "creationTime": soon.timestamp()})
        assert draft.migration_date == soon

    def test_missing_timestamp_uses_now(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "creationTime": "not a date"})
        assert draft.migration_date == FIXED_NOW

    def test_social_links_normalized(self, normalizer):
        draft = normalizer.normalize(
            {"mint": ADDRESS, "twitter": "@funcoin", "telegram": "@funchat", "website": "fun.coin"}
        )

        assert draft.twitter_url == "https://twitter.com/funcoin"
        assert draft.telegram_url == "https://t.me/funchat"
        assert draft.website_url == "https://fun.coin"

    def test_flags_follow_publish_policy(self, normalizer):
        synced = normalizer.normalize({"mint": ADDRESS})
        imported = normalizer.normalize({"mint": ADDRESS}, auto_publish=False)

        assert synced.published is True
        assert imported.published is False
        assert synced.is_pump_fun and synced.migrated
        assert synced.chain == "Solana"

    def test_chain_can_be_overridden_per_record(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS}, chain="Ethereum")
        assert draft.chain == "Ethereum"
        assert normalizer.normalize({"mint": ADDRESS}).chain == "Solana"

    def test_validate_rejects_blank_fields(self, normalizer):
        draft = normalizer.normalize({"mint": ADDRESS, "name": "Fun"})
        draft.symbol = "   "
        with pytest.raises(ValidationFailure, match="symbol"):
            normalizer.validate(draft)


class TestFieldHelpers:
    """Test timestamp, slug and social-link helpers"""

    def test_to_epoch_seconds(self):
        assert to_epoch_seconds(1700000000) == 1700000000
        assert to_epoch_seconds(1700000000123) == pytest.approx(1700000000.123)
        assert to_epoch_seconds("1700000000") == 1700000000
        assert to_epoch_seconds(0) is None
        assert to_epoch_seconds(True) is None
        assert to_epoch_seconds(None) is None

    def test_out_of_range_epoch_values_are_ignored(self):
        assert to_epoch_seconds(10**400) is None
        assert to_epoch_seconds("1e400") is None
        assert to_epoch_seconds(float("nan")) is None
        assert best_timestamp({"creationTime": 10**400, "createdAt": 1700000000}) == 0.0

    def test_best_timestamp_order(self):
        assert best_timestamp({"creationTime": 100, "graduatedAt": 200}) == 200
        assert best_timestamp({"createdAt": 300}) == 300
        assert best_timestamp({"name": "nothing"}) == 0.0
        assert best_timestamp(None) == 0.0

    def test_slugify(self):
        assert slugify("Moon Coin") == "moon-coin"
        assert slugify("--$WIF hat--") == "wif-hat"
        assert slugify("!!!") == ""

    def test_absolute_urls_pass_through(self):
        assert normalize_twitter("https://x.com/fun") == "https://x.com/fun"
        assert normalize_telegram("https://t.me/fun") == "https://t.me/fun"
        assert normalize_website("http://fun.coin") == "http://fun.coin"

    def test_blank_links_are_none(self):
        assert normalize_twitter(None) is None
        assert normalize_telegram("  ") is None
        assert normalize_website("") is None
