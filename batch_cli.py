# batch_cli.py
import argparse, json, csv, sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

print("[BATCH] Booting...")

from dotenv import load_dotenv
_loaded = load_dotenv()
print(f"[BATCH] .env loaded: {_loaded}")

from backend.config import Settings
from backend.core.analyze import check_contract
from backend.core.ingest import TokenDataFetcher
from backend.core.score import POLICIES

FIELDNAMES = ["contract", "name", "symbol", "holders", "top_holder_pct", "transactions",
              "failed_transactions", "risk_factors", "risk_score", "overall_risk", "error"]


def load_contracts(path: str) -> list[str]:
    print(f"[BATCH] Loading contracts from: {path}")
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    ids = []
    with p.open() as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            ids.append(s)
    print(f"[BATCH] Loaded {len(ids)} contracts")
    return ids


def flatten_result(contract: str, res: dict) -> dict:
    data = res.get("data") or {}
    info = data.get("tokenInfo") or {}
    holders = data.get("holders") or []
    txns = data.get("transactions") or []
    analysis = res.get("analysis") or {}
    score = res.get("risk_score")
    return {
        "contract": contract,
        "name": info.get("name", ""),
        "symbol": info.get("symbol", ""),
        "holders": len(holders),
        "top_holder_pct": f"{holders[0]['percentage']:.2f}" if holders else "",
        "transactions": len(txns),
        "failed_transactions": sum(1 for tx in txns if tx.get("status") != "SUCCESS"),
        "risk_factors": ";".join(f"{f['type']}:{f['severity']}" for f in analysis.get("riskFactors") or []),
        "risk_score": "" if score is None else score,
        "overall_risk": analysis.get("overallRisk", ""),
        "error": data.get("error") or res.get("error") or "",
    }


def run_batch(contracts: list[str], fetcher, policy: str, concurrency: int = 2) -> tuple[list[dict], list[dict]]:
    rows, json_out = [], []

    def work(cid: str):
        print(f"[BATCH][WORK] Start {cid}")
        try:
            return cid, check_contract(cid, fetcher, policy=policy)
        except Exception as e:
            print(f"[BATCH][WORK] FAIL {cid} -> {e}")
            return cid, {"analysis": {"overallRisk": "ERROR"}, "risk_score": None, "data": {}, "error": str(e)}

    with ThreadPoolExecutor(max_workers=max(1, concurrency)) as ex:
        futs = [ex.submit(work, c) for c in contracts]
        for fut in as_completed(futs):
            cid, res = fut.result()
            row = flatten_result(cid, res)
            rows.append(row)
            json_out.append({"contract": cid, **res})
            print(f"[BATCH] Result {cid} -> score={row['risk_score']} risk={row['overall_risk']}"
                  f"{' (err: ' + row['error'] + ')' if row['error'] else ''}")

    order = {c: i for i, c in enumerate(contracts)}
    rows.sort(key=lambda r: order[r["contract"]])
    json_out.sort(key=lambda r: order[r["contract"]])
    return rows, json_out


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="NEAR Token Checker - batch scanner")
    ap.add_argument("--infile", required=True, help="Text file with one contract id per line")
    ap.add_argument("--out-csv", default="batch_scan.csv", help="CSV output path")
    ap.add_argument("--out-json", default="batch_scan.json", help="JSON output path")
    ap.add_argument("--concurrency", type=int, default=2, help="Contracts checked in parallel")
    ap.add_argument("--policy", choices=sorted(POLICIES), help="Risk scoring policy")
    args = ap.parse_args(argv)
    print(f"[BATCH] Args -> infile={args.infile} out_csv={args.out_csv} out_json={args.out_json} "
          f"conc={args.concurrency} policy={args.policy}")

    try:
        settings = Settings.from_env()
        contracts = load_contracts(args.infile)
    except (ValueError, OSError) as e:
        print(f"[BATCH] ❌ {e}", file=sys.stderr)
        return 1
    print(f"[BATCH] ENV presence -> {settings.describe()}")

    rows, json_out = run_batch(contracts, TokenDataFetcher(settings),
                               args.policy or settings.risk_policy, args.concurrency)

    with open(args.out_csv, "w", newline="") as f:
        w = csv.DictWriter(f, fieldnames=FIELDNAMES)
        w.writeheader()
        w.writerows(rows)
    print(f"[BATCH] Wrote CSV -> {args.out_csv}")

    with open(args.out_json, "w") as f:
        json.dump(json_out, f, indent=2, default=str)
    print(f"[BATCH] Wrote JSON -> {args.out_json}")

    print("✅ Done. CSV →", args.out_csv, " JSON →", args.out_json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
