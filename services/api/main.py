import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from wopi_bridge.exceptions import BridgeError
from wopi_bridge.logging_config import setup_logging
from wopi_bridge.settings import Settings, get_settings
from wopi_bridge.storage import ObjectStorage, build_storage
from wopi_bridge.tokens import StatelessTokenPolicy, TokenRegistry
from services.api.exception_handlers import bridge_exception_handler, unhandled_exception_handler
from services.api.middleware import CorrelationIdMiddleware
from services.api.routers.access import router as access_router
from services.api.routers.wopi import router as wopi_router


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"true", "1", "yes"}


def build_token_policy(settings: Settings) -> TokenRegistry | StatelessTokenPolicy:
    if settings.tokens.stateless_enabled:
        logger.warning(
            "Stateless token mode is enabled: any token containing {marker!r} is accepted "
            "for any file. Do not run this in production.",
            marker=settings.tokens.marker,
        )
        return StatelessTokenPolicy(settings.tokens.marker)
    return TokenRegistry(
        ttl_seconds=settings.tokens.ttl_seconds,
        max_entries=settings.tokens.max_entries,
    )


def create_app(
    settings: Settings | None = None,
    *,
    storage: ObjectStorage | None = None,
    tokens: TokenRegistry | StatelessTokenPolicy | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="WOPI Bridge",
        version="0.1.0",
        description="WOPI host endpoints backed by object storage",
    )
    app.state.settings = settings
    app.state.storage = storage if storage is not None else build_storage(settings.storage)
    app.state.tokens = tokens if tokens is not None else build_token_policy(settings)

    app.add_middleware(CorrelationIdMiddleware)
    # CORS middleware - add LAST so it executes FIRST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
        expose_headers=["X-WOPI-CorrelationID"],
    )

    app.add_exception_handler(BridgeError, bridge_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/", response_class=PlainTextResponse, tags=["meta"])
    async def index() -> str:
        mode = "dummy token mode" if isinstance(app.state.tokens, StatelessTokenPolicy) else "token registry mode"
        return f"WOPI Server Running ({mode})..."

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(wopi_router)
    app.include_router(access_router)

    logger.info(
        "WOPI bridge initialised with storage={backend} host_url={host}",
        backend=settings.storage.backend,
        host=settings.wopi.host_base_url,
    )
    return app


def run() -> None:
    import uvicorn

    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        json_format=_env_flag("JSON_LOGGING"),
        log_file=Path(log_file) if log_file else None,
    )
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_config=None,
    )


if __name__ == "__main__":
    run()


__all__ = ["create_app", "build_token_policy", "run"]
