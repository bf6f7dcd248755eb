# cli.py
import argparse
import json
import sys

print("[CLI] Booting...")

from dotenv import load_dotenv
_loaded = load_dotenv()
print(f"[CLI] .env loaded: {_loaded}")

from backend.config import Settings
from backend.core.analyze import check_contract
from backend.core.ingest import TokenDataFetcher
from backend.core.narrative import NarrativeAnalyzer
from backend.core.score import POLICIES
from backend.errors import TokenCheckError

RISK_BADGES = {
    "HIGH": "❗ HIGH RISK",
    "MEDIUM": "⚠️  MEDIUM RISK",
    "LOW": "✅ LOW RISK",
    "SAFE": "✅ SAFE",
    "UNKNOWN": "❓ UNKNOWN (not enough data)",
    "ERROR": "✖ ERROR (no data)",
}


def print_report(result: dict) -> None:
    data = result.get("data") or {}
    info = data.get("tokenInfo") or {}
    analysis = result.get("analysis") or {}

    if data.get("error"):
        print(f"✖ Upstream error: {data['error']}")

    print(f"🔹 Token: {info.get('name') or 'Unknown Token'} ({info.get('symbol') or 'N/A'})")
    if info.get("total_supply") is not None:
        print(f"🔹 Total supply: {info['total_supply']:,.0f}")

    holders = data.get("holders") or []
    print(f"👥 Holders (first page): {len(holders)}")
    for h in holders[:5]:
        print(f"   {h['account']:<44} {h['percentage']:6.2f}%")

    txns = data.get("transactions") or []
    ok = sum(1 for tx in txns if tx.get("status") == "SUCCESS")
    print(f"🔁 Transactions (first page): {len(txns)} ({ok} successful)")

    for f in analysis.get("riskFactors") or []:
        print(f"🚨 [{f['severity']}] {f['type']}: {f['description']}")
    for f in analysis.get("positiveFactors") or []:
        print(f"✅ {f['type']}: {f['description']}")

    score = result.get("risk_score")
    print(f"🧮 Risk Score: {score if score is not None else 'n/a'}")
    tier = analysis.get("overallRisk", "?")
    print(RISK_BADGES.get(tier, f"❓ Unknown tier: {tier}"))

    if "score" in analysis:
        print(f"📝 Legitimacy Score (narrative): {analysis['score']}/100")
        print()
        print(analysis.get("report", ""))


def main(argv=None) -> int:
    print("[CLI] Parsing arguments...")
    p = argparse.ArgumentParser(description="NEAR Token Checker CLI")
    p.add_argument("--contract", required=True, help="NEAR token contract id, e.g. usdt.tether-token.near")
    p.add_argument("--policy", choices=sorted(POLICIES), help="Risk scoring policy (default: RISK_POLICY or 'adjusted')")
    p.add_argument("--narrative", action="store_true", help="Also request an LLM report (needs DEEPSEEK_API_KEY)")
    p.add_argument("--json", action="store_true", help="Print JSON only")
    args = p.parse_args(argv)
    print(f"[CLI] Args -> contract={args.contract} policy={args.policy} narrative={args.narrative} json={args.json}")

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"[CLI] Config FAIL -> {e}", file=sys.stderr)
        return 2
    print(f"[CLI] ENV presence -> {settings.describe()}")

    narrator = None
    if args.narrative:
        if not settings.narrative_enabled:
            print("[CLI] --narrative needs DEEPSEEK_API_KEY", file=sys.stderr)
            return 2
        narrator = NarrativeAnalyzer(settings)

    try:
        result = check_contract(
            args.contract,
            TokenDataFetcher(settings),
            policy=args.policy or settings.risk_policy,
            narrator=narrator,
        )
        print("[CLI] check_contract: OK")
    except TokenCheckError as e:
        print(f"[CLI] check_contract: FAIL -> {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print_report(result)
    print("[CLI] Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
