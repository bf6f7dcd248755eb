# backend/core/score.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Tuple

SEVERITY_WEIGHTS = {"HIGH": 3, "MEDIUM": 2, "LOW": 1}
POSITIVE_FACTOR_CREDIT = 0.5

# Two scoring variants have been in use; both are kept selectable.
#   adjusted: positive factors are collected and each one takes 0.5 off the score;
#             a zero score is SAFE.
#   raw:      risk factors only; a zero score is UNKNOWN.
POLICIES: Dict[str, Dict[str, Any]] = {
    "adjusted": {"positive_factors": True, "adjust": True, "zero_label": "SAFE"},
    "raw": {"positive_factors": False, "adjust": False, "zero_label": "UNKNOWN"},
}
DEFAULT_POLICY = "adjusted"


def empty_analysis(overall: str = "UNKNOWN") -> Dict[str, Any]:
    return {"riskFactors": [], "positiveFactors": [], "overallRisk": overall}


def _top_holder(holders: List[Dict[str, Any]]) -> Dict[str, Any]:
    # holders arrive sorted, but don't rely on it
    return max(holders, key=lambda h: h.get("percentage") or 0.0)


def check_holder_concentration(holders: List[Dict[str, Any]]) -> Tuple[Optional[dict], Optional[dict]]:
    """Return (risk_factor, positive_factor) for the largest holder; both None if no holders."""
    if not holders:
        return None, None
    pct = float(_top_holder(holders).get("percentage") or 0.0)
    desc = f"Single holder owns {pct:.2f}% of tokens"
    if pct > 50:
        return {"type": "HOLDER_CONCENTRATION", "description": desc, "severity": "HIGH"}, None
    if pct > 20:
        return {"type": "HOLDER_CONCENTRATION", "description": desc, "severity": "MEDIUM"}, None
    return None, {"type": "HOLDER_DISTRIBUTION", "description": "Token has good holder distribution"}


def check_transaction_health(transactions: List[Dict[str, Any]]) -> Tuple[Optional[dict], Optional[dict]]:
    if not transactions:
        return None, None
    successful = sum(1 for tx in transactions if tx.get("status") == "SUCCESS")
    failed = len(transactions) - successful
    if failed > successful:
        return {
            "type": "FAILED_TRANSACTIONS",
            "description": f"High rate of failed transactions ({failed} of {len(transactions)})",
            "severity": "MEDIUM",
        }, None
    return None, {"type": "TRANSACTION_HEALTH", "description": "Healthy transaction success rate"}


def documentation_factors(token_info: Dict[str, Any]) -> List[Dict[str, str]]:
    out = []
    if token_info.get("description"):
        out.append({"type": "DOCUMENTATION", "description": "Token has proper documentation"})
    if token_info.get("website"):
        out.append({"type": "WEBSITE", "description": "Token has an official website"})
    return out


def risk_weight(factors: Iterable[Dict[str, Any]]) -> int:
    return sum(SEVERITY_WEIGHTS.get(f.get("severity"), 0) for f in factors)


def adjusted_score(raw_score: float, positive_count: int) -> float:
    return max(0.0, raw_score - positive_count * POSITIVE_FACTOR_CREDIT)


def classify(score: float, zero_label: str = "SAFE") -> str:
    if score >= 5:
        return "HIGH"
    if score >= 3:
        return "MEDIUM"
    if score > 0:
        return "LOW"
    return zero_label


def score_token(token_data: Optional[Dict[str, Any]], policy: str = DEFAULT_POLICY) -> Tuple[Dict[str, Any], Optional[float]]:
    """
    Rule-based assessment of normalized token data.
    Returns (analysis, risk_score); risk_score is None when there is nothing to score.
    Pure: same input, same output.
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown scoring policy: {policy}")
    rules = POLICIES[policy]

    token_data = token_data or {}
    holders = token_data.get("holders") or []
    transactions = token_data.get("transactions") or []
    if not holders and not transactions:
        return empty_analysis("UNKNOWN"), None

    analysis = empty_analysis()
    for risk, positive in (check_holder_concentration(holders), check_transaction_health(transactions)):
        if risk:
            analysis["riskFactors"].append(risk)
        if positive and rules["positive_factors"]:
            analysis["positiveFactors"].append(positive)
    if rules["positive_factors"]:
        analysis["positiveFactors"].extend(documentation_factors(token_data.get("tokenInfo") or {}))

    score: float = risk_weight(analysis["riskFactors"])
    if rules["adjust"]:
        score = adjusted_score(score, len(analysis["positiveFactors"]))

    analysis["overallRisk"] = classify(score, rules["zero_label"])
    return analysis, score
