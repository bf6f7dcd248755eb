# backend/core/analyze.py
from __future__ import annotations

from typing import Any, Dict, Optional

from backend.core.ingest import empty_token_data
from backend.core.score import DEFAULT_POLICY, empty_analysis, score_token
from backend.errors import AnalysisServiceError, ValidationError


print("[ANALYZE] Module import start")


def validate_contract_id(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Contract ID is required", "Please provide a valid NEAR contract ID")
    return raw.strip()


def safe_result(error: Optional[str] = None) -> Dict[str, Any]:
    """Well-shaped body for error paths, so the page can render 'no data'."""
    out: Dict[str, Any] = {
        "analysis": empty_analysis("ERROR"),
        "risk_score": None,
        "data": empty_token_data(),
    }
    if error:
        out["error"] = error
    return out


def check_contract(contract_id: Any, fetcher, *, policy: str = DEFAULT_POLICY, narrator=None) -> Dict[str, Any]:
    """
    Fetch, score and (optionally) narrate one contract.
    `fetcher` needs get_token_info(contract_id); `narrator` needs analyze(token_data).
    Raises ValidationError for a blank id and whatever the narrator raises.
    """
    cid = validate_contract_id(contract_id)
    print(f"[ANALYZE] check_contract start contract={cid} policy={policy} narrative={'yes' if narrator else 'no'}")

    data = fetcher.get_token_info(cid)
    if data.get("error"):
        print(f"[ANALYZE] Ingestion degraded for {cid}: {data['error']}")
        return {"analysis": empty_analysis("ERROR"), "risk_score": None, "data": data}

    analysis, risk_score = score_token(data, policy)
    print(f"[ANALYZE] Score OK: contract={cid} risk_score={risk_score} overall={analysis['overallRisk']} "
          f"risks={len(analysis['riskFactors'])} positives={len(analysis['positiveFactors'])}")

    if narrator is not None:
        try:
            narrative = narrator.analyze(data)
        except AnalysisServiceError as e:
            print(f"[ANALYZE] Narrative FAIL contract={cid}: {e}")
            e.partial = {"analysis": analysis, "risk_score": risk_score, "data": data}
            raise
        analysis["report"] = narrative["report"]
        analysis["score"] = narrative["score"]

    return {"analysis": analysis, "risk_score": risk_score, "data": data}
