"""
Tests for the batch scanner helpers.
"""

from __future__ import annotations

import pytest

from batch_cli import flatten_result, load_contracts, run_batch
from tests.test_analyze import CONCENTRATED, StubFetcher


def test_load_contracts_skips_comments(tmp_path):
    f = tmp_path / "ids.txt"
    f.write_text("# tokens\nwrap.near\n\n  usdt.tether-token.near  \n")
    assert load_contracts(str(f)) == ["wrap.near", "usdt.tether-token.near"]


def test_load_contracts_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_contracts(str(tmp_path / "nope.txt"))


def test_flatten_result():
    row = flatten_result("token.near", {
        "analysis": {"overallRisk": "MEDIUM",
                     "riskFactors": [{"type": "HOLDER_CONCENTRATION", "severity": "HIGH", "description": ""}]},
        "risk_score": 3,
        "data": CONCENTRATED,
    })
    assert row["top_holder_pct"] == "60.00"
    assert row["risk_factors"] == "HOLDER_CONCENTRATION:HIGH"
    assert row["holders"] == 2
    assert row["error"] == ""


def test_run_batch_keeps_input_order():
    rows, json_out = run_batch(["a.near", "", "c.near"], StubFetcher(CONCENTRATED), "adjusted", concurrency=3)
    assert [r["contract"] for r in rows] == ["a.near", "", "c.near"]
    assert rows[1]["error"] == "Contract ID is required"
    assert rows[0]["overall_risk"] == "MEDIUM"
    assert json_out[2]["contract"] == "c.near"
