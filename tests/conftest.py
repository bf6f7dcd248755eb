"""
Shared fixtures for the token checker tests.
"""

from __future__ import annotations

import pytest

from backend.config import Settings


class MockResponse:
    def __init__(self, data=None, status_code: int = 200, text: str = ""):
        self._data = data
        self.status_code = status_code
        self.text = text

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


def mock_resp(data=None, status_code: int = 200, text: str = "") -> MockResponse:
    return MockResponse(data, status_code, text)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        nearblocks_api_key="test_nearblocks_key",
        nearblocks_api="https://nearblocks.test/v1",
        upstream_timeout=5,
        upstream_max_attempts=3,
        upstream_retry_delay=0,
        static_dir="does-not-exist",
    )


@pytest.fixture()
def narrative_settings(settings: Settings) -> Settings:
    settings.deepseek_api_key = "test_deepseek_key"
    return settings


def holders_payload(amounts: list[str]) -> dict:
    return {"holders": [{"account": f"holder{i}.near", "amount": a} for i, a in enumerate(amounts)]}


def txns_payload(statuses: list) -> dict:
    txns = []
    for i, st in enumerate(statuses):
        tx = {
            "event_index": str(i),
            "affected_account_id": "alice.near",
            "involved_account_id": "bob.near",
            "delta_amount": "100",
            "cause": "TRANSFER",
            "block_timestamp": "1700000000000000000",
            "block": {"block_height": 100 + i},
        }
        if st is not None:
            tx["outcomes"] = {"status": st}
        txns.append(tx)
    return {"txns": txns}
