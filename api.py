# api.py
from pathlib import Path
from typing import Optional

print("[API] Booting FastAPI...")

from fastapi import FastAPI, APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from dotenv import load_dotenv

_loaded = load_dotenv()
print(f"[API] .env loaded: {_loaded}")

from backend.config import Settings
from backend.core.analyze import check_contract, safe_result
from backend.core.ingest import TokenDataFetcher
from backend.core.narrative import NarrativeAnalyzer
from backend.errors import AnalysisServiceError, ValidationError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CheckRequest(BaseModel):
    contractId: Optional[str] = None
    narrative: Optional[bool] = None


def _error_body(error: str, details: str, contract_id=None, partial: Optional[dict] = None) -> dict:
    body = partial if partial is not None else safe_result()
    body.update({"error": error, "details": details, "contractId": contract_id})
    return body


def create_app(settings: Optional[Settings] = None, fetcher=None, narrator=None) -> FastAPI:
    settings = settings or Settings.from_env()
    print(f"[API] ENV presence -> {settings.describe()}")

    fetcher = fetcher or TokenDataFetcher(settings)
    if narrator is None and settings.narrative_enabled:
        narrator = NarrativeAnalyzer(settings)

    app = FastAPI(title="NEAR Token Checker API", version="0.4.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    print("[API] CORS middleware registered.")

    @app.exception_handler(RequestValidationError)
    async def bad_body(request: Request, exc: RequestValidationError):
        print(f"[API] {request.url.path} invalid body -> {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": "Expected JSON like {\"contractId\": \"token.near\"}"},
        )

    api = APIRouter(prefix="/api")

    @api.get("/health")
    def health():
        print("[API] GET /api/health")
        return {"ok": True}

    @api.options("/check-contract")
    def check_contract_options():
        return Response(status_code=200, headers=CORS_HEADERS)

    @api.post("/check-contract")
    def check(req: CheckRequest):
        print(f"[API] POST /api/check-contract contractId={req.contractId!r} narrative={req.narrative}")
        want_narrative = settings.narrative_enabled if req.narrative is None else req.narrative
        if want_narrative and narrator is None:
            print("[API] narrative requested but DEEPSEEK_API_KEY is not set; skipping")

        try:
            out = check_contract(
                req.contractId,
                fetcher,
                policy=settings.risk_policy,
                narrator=narrator if want_narrative else None,
            )
        except ValidationError as ve:
            print(f"[API] /check-contract ValidationError -> {ve}")
            return JSONResponse(status_code=400, content={"error": str(ve), "details": ve.details})
        except AnalysisServiceError as e:
            print(f"[API] /check-contract narrative ERROR contractId={req.contractId} -> {e}")
            return JSONResponse(
                status_code=500,
                content=_error_body("Failed to analyze contract", str(e), req.contractId, e.partial),
            )
        except Exception as e:
            print(f"[API] /check-contract ERROR contractId={req.contractId} -> {e}")
            return JSONResponse(
                status_code=500,
                content=_error_body("Failed to analyze contract", str(e), req.contractId),
            )

        print(f"[API] /check-contract OK contractId={req.contractId} risk_score={out['risk_score']} "
              f"overall={out['analysis']['overallRisk']}")
        return out

    # Register API first, then static site at /
    app.include_router(api)
    print("[API] Router included.")

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="web")
        print(f"[API] Static mount: / -> {static_dir}/")
    else:
        print(f"[API] {static_dir}/ not found; static page not served.")

    return app


app = create_app()
