# backend/errors.py
# Purpose: Exception taxonomy shared by ingestion, scoring and the HTTP surface.

from __future__ import annotations
from typing import Optional


class TokenCheckError(Exception):
    """Base class for everything this backend raises on purpose."""


class UpstreamError(TokenCheckError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class UpstreamHTTPError(UpstreamError):
    def __init__(self, status_code: int, url: Optional[str] = None, body: str = ""):
        super().__init__(f"NEARBLOCKS API request failed: {status_code}", url)
        self.status_code = status_code
        self.body = body


class UpstreamTimeoutError(UpstreamError):
    pass


class UpstreamNetworkError(UpstreamError):
    pass


class ValidationError(TokenCheckError):
    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.details = details


class ParseError(TokenCheckError, ValueError):
    pass


class AnalysisServiceError(TokenCheckError):
    def __init__(self, message: str):
        super().__init__(message)
        # set by check_contract: what was already computed when the service failed
        self.partial: Optional[dict] = None


__all__ = [
    "TokenCheckError",
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamTimeoutError",
    "UpstreamNetworkError",
    "ValidationError",
    "ParseError",
    "AnalysisServiceError",
]
