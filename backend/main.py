from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings
from logging_setup import configure_logging
from routers.analyzers import router as analyzers_router
from schemas.insurance_policy import ErrorEnvelope

CORS_ALLOWED_METHODS = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]
CORS_ALLOWED_HEADERS = [
    "X-CSRF-Token", "X-Requested-With", "Accept", "Accept-Version", "Content-Length",
    "Content-MD5", "Content-Type", "Date", "X-Api-Version", "X-API-Key",
]


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Workers' Comp Policy Analyzer",
        description="Upload a Workers' Compensation policy and get savings and coverage insights",
    )

    # allow_origins="*" with credentials makes Starlette echo the request origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_envelope(request: Request, exc: StarletteHTTPException):
        envelope = ErrorEnvelope(error=str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope.model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None),
        )

    @app.get("/")
    def read_root():
        return {"status": "online", "message": "Workers' Comp Policy Analyzer API"}

    app.include_router(analyzers_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8081)
