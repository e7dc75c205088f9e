"""
AWS Lambda function that triggers the migrated-token auto-sync endpoint.

Deploy this to Lambda and schedule with EventBridge; every invocation is one
capped, stateless sync batch on the API side.
"""

import json
import os
import urllib.error
import urllib.request
from typing import Any, Dict


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Call GET /migrated-tokens/auto-sync and relay its report.

    Environment Variables:
        API_URL: Base URL of the deployed API (e.g., https://xxx.awsapprunner.com)
        SYNC_TIMEOUT: Request timeout in seconds (default: 60)

    EventBridge Rule Example:
        Schedule: rate(10 minutes)
    """
    api_url = os.environ.get("API_URL")
    if not api_url:
        return {"statusCode": 500, "body": json.dumps({"error": "API_URL environment variable not set"})}

    timeout = int(os.environ.get("SYNC_TIMEOUT", "60"))
    endpoint = f"{api_url.rstrip('/')}/migrated-tokens/auto-sync"

    request = urllib.request.Request(endpoint, method="GET", headers={"Accept": "application/json", "User-Agent": "MemeVaultSyncTrigger/1.0"})

    try:
        print(f"Triggering auto-sync at: {endpoint}")

        with urllib.request.urlopen(request, timeout=timeout) as response:
            report = json.loads(response.read().decode("utf-8"))
            print(f"Auto-sync completed: {json.dumps(report)}")
            return {"statusCode": 200, "body": json.dumps({"message": "Auto-sync triggered successfully", "result": report})}

    except urllib.error.HTTPError as e:
        error_body = e.read().decode("utf-8") if e.fp else str(e)
        print(f"Auto-sync failed with HTTP {e.code}: {error_body}")
        return {"statusCode": e.code, "body": json.dumps({"error": "Failed to trigger auto-sync", "message": f"HTTP {e.code}: {error_body}"})}

    except urllib.error.URLError as e:
        print(f"Auto-sync request failed: {e}")
        return {"statusCode": 500, "body": json.dumps({"error": "Failed to trigger auto-sync", "message": f"Connection error: {e}"})}


# For local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        os.environ["API_URL"] = sys.argv[1]

    print(json.dumps(lambda_handler({}, None), indent=2))
