"""Engine error types and the standard API error payload."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Error surfaced to API callers with a status code and a stable code string."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.payload = build_error_payload(code, message, details)


class LeadQueueConflictError(AppError):
    """A lead queue already exists for the requested run date."""

    def __init__(self, run_date: date):
        super().__init__(
            409,
            "lead_queue_exists",
            f"A lead queue was already generated for {run_date.isoformat()}. "
            "Use dry_run to preview, or delete the existing queue before re-running.",
            {"run_date": run_date.isoformat()},
        )
        self.run_date = run_date


class ProviderConfigError(Exception):
    """A search or fetch provider cannot run because credentials are missing."""

    def __init__(self, provider: str, missing: List[str]):
        super().__init__(f"{provider}: missing {', '.join(missing)}")
        self.provider = provider
        self.missing = missing


class ProviderError(Exception):
    """Transport failure or non-2xx response from a search/fetch provider."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
