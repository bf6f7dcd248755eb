# backend/core/ingest.py
# Purpose: Fetch token info, holders and transactions from NearBlocks (first page
# only) in parallel and normalize them into {tokenInfo, holders, transactions}.

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List
from urllib.parse import quote

from backend.config import Settings
from backend.utils.http import bearer_headers, http_get_json
from backend.utils.parse import parse_or_default

# tokenInfo fields NearBlocks sends as decimal strings
NUMERIC_TOKEN_FIELDS = ("decimals", "total_supply", "circulating_supply", "price", "market_cap")


def empty_token_data() -> Dict[str, Any]:
    return {"tokenInfo": {}, "holders": [], "transactions": []}


def normalize_token_info(payload: Any) -> Dict[str, Any]:
    contracts = payload.get("contracts") if isinstance(payload, dict) else None
    if not isinstance(contracts, list) or not contracts or not isinstance(contracts[0], dict):
        return {}
    info = dict(contracts[0])
    for key in NUMERIC_TOKEN_FIELDS:
        if info.get(key) is not None:
            info[key] = parse_or_default(info[key])
    return info


def compute_percentages(holders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Percent of the page total per holder; all zeros when the total is zero."""
    total_supply = sum(h.get("amount") or 0.0 for h in holders)
    out = []
    for h in holders:
        amount = h.get("amount") or 0.0
        pct = (amount / total_supply) * 100.0 if total_supply > 0 else 0.0
        out.append({**h, "percentage": pct})
    return out


def normalize_holders(payload: Any) -> List[Dict[str, Any]]:
    raw = payload.get("holders") if isinstance(payload, dict) else None
    if not isinstance(raw, list) or not raw:
        return []

    holders = []
    for h in raw:
        h = h if isinstance(h, dict) else {}
        holders.append({
            "account": h.get("account_id") or h.get("account") or "Unknown",
            "amount": max(0.0, parse_or_default(h.get("amount"))),
            "percentage": 0.0,
        })

    holders = compute_percentages(holders)
    holders.sort(key=lambda h: h["amount"], reverse=True)
    return holders


def _tx_status(tx: Dict[str, Any]) -> str:
    outcomes = tx.get("outcomes")
    status = outcomes.get("status") if isinstance(outcomes, dict) else None
    if status is None:
        status = tx.get("status")
    # NearBlocks reports outcomes.status as a boolean
    if status is True:
        return "SUCCESS"
    if status is False:
        return "FAILURE"
    return str(status) if status not in (None, "") else "UNKNOWN"


def normalize_transactions(payload: Any) -> List[Dict[str, Any]]:
    raw = payload.get("txns") if isinstance(payload, dict) else None
    if not isinstance(raw, list):
        return []

    txns = []
    for tx in raw:
        tx = tx if isinstance(tx, dict) else {}
        block = tx.get("block") if isinstance(tx.get("block"), dict) else {}
        txns.append({
            "event_index": tx.get("event_index"),
            "affected_account_id": tx.get("affected_account_id") or "Unknown",
            "involved_account_id": tx.get("involved_account_id") or "Unknown",
            "delta_amount": tx.get("delta_amount") or tx.get("delta") or "0",
            "cause": tx.get("cause") or "Unknown",
            "receipt_id": tx.get("receipt_id"),
            "block_timestamp": tx.get("block_timestamp"),
            "block_height": block.get("block_height", tx.get("block_height")),
            "status": _tx_status(tx),
        })
    return txns


def format_token_data(token_payload: Any, holders_payload: Any, txns_payload: Any) -> Dict[str, Any]:
    return {
        "tokenInfo": normalize_token_info(token_payload),
        "holders": normalize_holders(holders_payload),
        "transactions": normalize_transactions(txns_payload),
    }


class TokenDataFetcher:
    """NearBlocks client; one instance per Settings, no state between calls."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.headers = bearer_headers(settings.nearblocks_api_key)

    def fetch_resource(self, endpoint: str) -> Any:
        url = f"{self.settings.nearblocks_api}{endpoint}"
        print(f"[INGEST] Fetching from NEARBLOCKS: {url}")
        return http_get_json(
            url,
            headers=self.headers,
            timeout=self.settings.upstream_timeout,
            max_attempts=self.settings.upstream_max_attempts,
            retry_delay=self.settings.upstream_retry_delay,
        )

    def get_token_info(self, contract_id: str) -> Dict[str, Any]:
        """
        Return {tokenInfo, holders, transactions}. Never raises: any failure gives
        the empty triple plus an `error` message.
        """
        print(f"[INGEST] Starting token info fetch for: {contract_id}")
        try:
            cid = quote(contract_id.strip(), safe="")
            endpoints = [f"/fts/{cid}", f"/fts/{cid}/holders", f"/fts/{cid}/txns"]
            with ThreadPoolExecutor(max_workers=len(endpoints)) as ex:
                futs = [ex.submit(self.fetch_resource, ep) for ep in endpoints]
                token_payload, holders_payload, txns_payload = [f.result() for f in futs]

            data = format_token_data(token_payload, holders_payload, txns_payload)
            print(f"[INGEST] Formatted data OK: holders={len(data['holders'])} "
                  f"txns={len(data['transactions'])} tokenInfo={'yes' if data['tokenInfo'] else 'no'}")
            return data
        except Exception as e:
            print(f"[INGEST] Error fetching token info for {contract_id}: {e}")
            out = empty_token_data()
            out["error"] = str(e) or type(e).__name__
            return out


__all__ = [
    "TokenDataFetcher",
    "compute_percentages",
    "empty_token_data",
    "format_token_data",
    "normalize_holders",
    "normalize_token_info",
    "normalize_transactions",
]
