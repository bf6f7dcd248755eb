# backend/utils/http.py
# Purpose: GET JSON from the explorer API with a per-call timeout and a bounded,
# fixed-delay retry. Errors are mapped onto backend.errors; the last one is raised.

import time
from typing import Any, Dict, Optional

import requests

from backend.errors import (
    UpstreamError,
    UpstreamHTTPError,
    UpstreamNetworkError,
    UpstreamTimeoutError,
)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


def bearer_headers(api_key: str) -> Dict[str, str]:
    headers = {"accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _get_once(url: str, headers: Dict[str, str], timeout: float) -> Any:
    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
    except requests.Timeout as e:
        raise UpstreamTimeoutError(f"Request timed out after {timeout}s", url) from e
    except requests.RequestException as e:
        raise UpstreamNetworkError(f"Request failed: {e}", url) from e

    if not 200 <= resp.status_code < 300:
        raise UpstreamHTTPError(resp.status_code, url, body=(resp.text or "")[:500])
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamHTTPError(resp.status_code, url, body="invalid JSON body") from e


def http_get_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
    max_attempts: int = 3,
    retry_delay: float = 1.0,
) -> Any:
    """
    GET `url` and return the decoded JSON.
    Timeouts, transport failures and 429/5xx are retried up to `max_attempts`
    with `retry_delay` seconds between attempts; other non-2xx raise at once.
    """
    max_attempts = max(1, int(max_attempts))
    last_error: Optional[UpstreamError] = None
    for attempt in range(1, max_attempts + 1):
        try:
            return _get_once(url, headers or {}, timeout)
        except UpstreamHTTPError as e:
            if e.status_code not in RETRYABLE_STATUS:
                print(f"[HTTP] {url} -> HTTP {e.status_code} (not retried)")
                raise
            last_error = e
            print(f"[HTTP] {url} -> HTTP {e.status_code} on attempt {attempt}/{max_attempts}")
        except UpstreamTimeoutError as e:
            last_error = e
            print(f"[HTTP] Request timeout on attempt {attempt}/{max_attempts}: {url}")
        except UpstreamNetworkError as e:
            last_error = e
            print(f"[HTTP] Request failed on attempt {attempt}/{max_attempts}: {e}")

        if attempt < max_attempts and retry_delay > 0:
            time.sleep(retry_delay)

    print(f"[HTTP] All {max_attempts} attempts exhausted for {url}: {last_error}")
    raise last_error


__all__ = ["RETRYABLE_STATUS", "bearer_headers", "http_get_json"]
