# backend/core/narrative.py
# Purpose: Optional LLM-written risk report (DeepSeek, OpenAI-compatible chat API).
# Output is free-form markdown ending in <SCORE>NN</SCORE>; only the score is parsed.

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

import requests

from backend.config import Settings
from backend.errors import AnalysisServiceError

DEFAULT_SCORE = 50
SCORE_RE = re.compile(r"<SCORE>\s*(\d{1,3})\s*</SCORE>", re.IGNORECASE)

SYSTEM_PROMPT = """You are a smart-contract risk analyst for NEAR Protocol fungible tokens.
You receive token metadata, the largest holders (with percentage of the listed supply)
and recent transactions as JSON. Write a concise markdown report with these sections:
## Overview, ## Holder Distribution, ## Transaction Activity, ## Red Flags, ## Verdict.
Be factual, cite numbers from the data, and do not invent facts that are not in it.
Finish with a legitimacy score from 0 (almost certainly a scam) to 100 (clearly legitimate)
on its own last line, formatted exactly as <SCORE>NN</SCORE>."""

# keeps the prompt well inside the model context
MAX_HOLDERS_IN_PROMPT = 25
MAX_TXNS_IN_PROMPT = 25


def extract_score(text: Optional[str], default: int = DEFAULT_SCORE) -> int:
    matches = SCORE_RE.findall(text or "")
    if not matches:
        return default
    return max(0, min(100, int(matches[-1])))


def strip_score(text: str) -> str:
    return SCORE_RE.sub("", text).rstrip()


def build_user_prompt(token_data: Dict[str, Any]) -> str:
    trimmed = {
        "tokenInfo": token_data.get("tokenInfo") or {},
        "holders": (token_data.get("holders") or [])[:MAX_HOLDERS_IN_PROMPT],
        "transactions": (token_data.get("transactions") or [])[:MAX_TXNS_IN_PROMPT],
    }
    return ("Analyze this NEAR token and rate its legitimacy.\n\n"
            f"```json\n{json.dumps(trimmed, indent=2, default=str)}\n```")


class NarrativeAnalyzer:
    """Produces {report, score}. Raises AnalysisServiceError on any failure; never retries."""

    def __init__(self, settings: Settings):
        if not settings.deepseek_api_key:
            raise ValueError("DEEPSEEK_API_KEY is required for narrative analysis")
        self.url = f"{settings.deepseek_api}/chat/completions"
        self.model = settings.deepseek_model
        self.timeout = settings.narrative_timeout
        self.headers = {
            "Authorization": f"Bearer {settings.deepseek_api_key}",
            "Content-Type": "application/json",
        }

    def analyze(self, token_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(token_data)},
            ],
            "temperature": 0.2,
        }
        print(f"[NARRATIVE] Requesting report model={self.model}")
        try:
            resp = requests.post(self.url, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise AnalysisServiceError(f"Narrative service unreachable: {e}") from e

        if resp.status_code != 200:
            raise AnalysisServiceError(f"Narrative service returned HTTP {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AnalysisServiceError(f"Unexpected narrative response: {e}") from e
        if not isinstance(content, str) or not content.strip():
            raise AnalysisServiceError("Narrative service returned an empty report")

        score = extract_score(content)
        print(f"[NARRATIVE] Report OK chars={len(content)} score={score}")
        return {"report": strip_score(content), "score": score}


__all__ = ["NarrativeAnalyzer", "SYSTEM_PROMPT", "build_user_prompt", "extract_score", "strip_score"]
