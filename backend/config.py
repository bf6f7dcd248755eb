# backend/config.py
# Purpose: Explicit settings object built from the environment (.env is loaded by
# the entrypoints: api.py, cli.py, batch_cli.py). Passed around, never global.

from __future__ import annotations

import os
import warnings
from typing import Mapping, Optional

from backend.core.score import POLICIES, DEFAULT_POLICY

NEARBLOCKS_API = "https://api.nearblocks.io/v1"
DEEPSEEK_API = "https://api.deepseek.com/v1"
DEEPSEEK_MODEL = "deepseek-chat"


class Settings:
    def __init__(
        self,
        *,
        nearblocks_api_key: str = "",
        nearblocks_api: str = NEARBLOCKS_API,
        upstream_timeout: float = 10.0,
        upstream_max_attempts: int = 3,
        upstream_retry_delay: float = 1.0,
        deepseek_api_key: str = "",
        deepseek_api: str = DEEPSEEK_API,
        deepseek_model: str = DEEPSEEK_MODEL,
        narrative_timeout: float = 60.0,
        risk_policy: str = DEFAULT_POLICY,
        static_dir: str = "web",
    ):
        if risk_policy not in POLICIES:
            raise ValueError(f"Unknown RISK_POLICY '{risk_policy}' (expected one of {sorted(POLICIES)})")
        if upstream_max_attempts < 1:
            raise ValueError("UPSTREAM_MAX_ATTEMPTS must be >= 1")
        if upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be > 0")

        self.nearblocks_api_key = nearblocks_api_key
        self.nearblocks_api = nearblocks_api.rstrip("/")
        self.upstream_timeout = float(upstream_timeout)
        self.upstream_max_attempts = int(upstream_max_attempts)
        self.upstream_retry_delay = max(0.0, float(upstream_retry_delay))
        self.deepseek_api_key = deepseek_api_key
        self.deepseek_api = deepseek_api.rstrip("/")
        self.deepseek_model = deepseek_model
        self.narrative_timeout = float(narrative_timeout)
        self.risk_policy = risk_policy
        self.static_dir = static_dir

    @property
    def narrative_enabled(self) -> bool:
        return bool(self.deepseek_api_key)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        def _get(key: str, default: str = "") -> str:
            return (env.get(key) or default).strip()

        def _num(key: str, default, cast):
            raw = _get(key)
            if not raw:
                return default
            try:
                return cast(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {key}: {raw!r}")

        key = _get("NEARBLOCKS_API_KEY")
        if not key:
            warnings.warn(
                "NEARBLOCKS_API_KEY not set. NearBlocks requests will be unauthenticated "
                "(public rate limits apply).",
                UserWarning,
                stacklevel=2,
            )

        return cls(
            nearblocks_api_key=key,
            nearblocks_api=_get("NEARBLOCKS_API", NEARBLOCKS_API),
            upstream_timeout=_num("UPSTREAM_TIMEOUT", 10.0, float),
            upstream_max_attempts=_num("UPSTREAM_MAX_ATTEMPTS", 3, int),
            upstream_retry_delay=_num("UPSTREAM_RETRY_DELAY", 1.0, float),
            deepseek_api_key=_get("DEEPSEEK_API_KEY"),
            deepseek_api=_get("DEEPSEEK_API", DEEPSEEK_API),
            deepseek_model=_get("DEEPSEEK_MODEL", DEEPSEEK_MODEL),
            narrative_timeout=_num("NARRATIVE_TIMEOUT", 60.0, float),
            risk_policy=_get("RISK_POLICY", DEFAULT_POLICY).lower(),
            static_dir=_get("STATIC_DIR", "web"),
        )

    def describe(self) -> str:
        """One-line env presence summary for boot logs (no secret values)."""
        return (f"NEARBLOCKS_API_KEY: {'yes' if self.nearblocks_api_key else 'no'}, "
                f"DEEPSEEK_API_KEY: {'yes' if self.deepseek_api_key else 'no'}, "
                f"policy={self.risk_policy}, timeout={self.upstream_timeout}s, "
                f"attempts={self.upstream_max_attempts}")


__all__ = ["Settings", "NEARBLOCKS_API", "DEEPSEEK_API", "DEEPSEEK_MODEL"]
