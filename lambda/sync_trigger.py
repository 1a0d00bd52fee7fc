"""
Scheduled trigger for the listing sync service.

EventBridge invokes ``lambda_handler``, which calls ``POST {API_URL}/sync/run``
and waits for the run to finish. The invocation reports the run's own health:
a run with failed listings comes back as 502, and a run refused because
another one is in progress comes back as 409. Either way the schedule's
error alarms see it.

Environment Variables:
    API_URL: The listing sync service URL (e.g., https://sync.example.com)
    SYNC_TIMEOUT: Seconds to wait for the run to finish (default: 600)
"""

import json
import os
import urllib.error
import urllib.request
from typing import Any, Dict, List

DEFAULT_TIMEOUT_SECONDS = 600
RUN_FAILED_STATUS = 502
UNREACHABLE_STATUS = 504


def _reply(status: int, **body: Any) -> Dict[str, Any]:
    return {"statusCode": status, "body": json.dumps(body, default=str)}


def failed_listings(payload: Dict[str, Any]) -> List[str]:
    result = payload.get("result") or {}
    return list(result.get("failed_listings") or [])


def run_status(payload: Dict[str, Any]) -> int:
    """200 only for a run that completed with every listing written."""
    if not payload.get("success") or failed_listings(payload):
        return RUN_FAILED_STATUS
    return 200


def request_sync(api_url: str, timeout: float) -> Dict[str, Any]:
    request = urllib.request.Request(
        f"{api_url.rstrip('/')}/sync/run",
        data=b"",
        method="POST",
        headers={"Content-Type": "application/json", "User-Agent": "ListingSyncTrigger/1.0"},
    )
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return json.loads(response.read().decode("utf-8"))


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    api_url = os.environ.get("API_URL")
    if not api_url:
        return _reply(500, success=False, error="API_URL environment variable not set")
    timeout = float(os.environ.get("SYNC_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))

    try:
        payload = request_sync(api_url, timeout)
    except urllib.error.HTTPError as e:
        detail = e.read().decode("utf-8", "replace") if e.fp else e.reason
        print(f"Sync endpoint answered HTTP {e.code}: {detail}")
        return _reply(e.code, success=False, error=f"HTTP {e.code}: {detail}")
    except (urllib.error.URLError, TimeoutError) as e:
        print(f"Sync endpoint unreachable: {e}")
        return _reply(UNREACHABLE_STATUS, success=False, error=f"Connection error: {e}")
    except ValueError as e:
        print(f"Sync endpoint returned a non-JSON body: {e}")
        return _reply(RUN_FAILED_STATUS, success=False, error="Malformed response from sync endpoint")

    status = run_status(payload)
    failed = failed_listings(payload)
    if status == 200:
        print("Sync finished cleanly")
    else:
        print(f"Sync finished with failures: error={payload.get('error')} failed_listings={failed}")
    return _reply(
        status,
        success=status == 200,
        failed_listings=failed,
        error=payload.get("error"),
        sync_result=payload.get("result"),
    )


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        os.environ["API_URL"] = sys.argv[1]
    print(json.dumps(lambda_handler({}, None), indent=2))
