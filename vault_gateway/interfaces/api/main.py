"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vault_gateway.application.services.client_cache import VaultClientCache
from vault_gateway.application.services.vault_gateway_service import VaultGatewayService
from vault_gateway.config import Settings, settings as default_settings
from vault_gateway.domain.ports.vault_backend import VaultClientFactory
from vault_gateway.infrastructure.adapters import create_vault_client_factory
from vault_gateway.infrastructure.config.credentials_loader import (
    CredentialsConfig,
    load_credentials,
)
from vault_gateway.infrastructure.logging_config import setup_logging
from vault_gateway.interfaces.api.container import ApiContainer
from vault_gateway.interfaces.api.routes import external_function, health, process

logger = logging.getLogger(__name__)


def build_container(
    settings: Settings,
    client_factory: VaultClientFactory | None = None,
    credentials_config: CredentialsConfig | None = None,
) -> ApiContainer:
    """组装容器：凭证只在这里加载一次，客户端缓存与网关门面随进程存活"""
    credentials_config = credentials_config or load_credentials(settings)
    client_cache = VaultClientCache(
        credentials=credentials_config.credentials,
        client_factory=client_factory or create_vault_client_factory(settings),
        max_size=settings.client_cache_max_size,
    )
    gateway = VaultGatewayService.from_settings(
        client_cache, settings, batching=credentials_config.batching
    )
    return ApiContainer(settings=settings, client_cache=client_cache, gateway=gateway)


def _get_display_host(settings: Settings) -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


def create_app(
    settings: Settings | None = None,
    container: ApiContainer | None = None,
) -> FastAPI:
    """创建应用

    参数：
        settings: 配置（默认使用全局配置）
        container: 预先组装好的容器（测试使用）；为空时在 lifespan 中组装
    """
    settings = settings or (container.settings if container else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings)
        display_host = _get_display_host(settings)
        logger.info("%s v%s 启动中...", settings.app_name, settings.app_version)
        logger.info("环境: %s, 后端: %s", settings.env, settings.vault_backend)
        logger.info("服务地址: http://%s:%s", display_host, settings.port)

        if getattr(app.state, "container", None) is None:
            app.state.container = build_container(settings)

        try:
            yield
        finally:
            await app.state.container.client_cache.aclose()
            logger.info("%s 关闭中...", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Vault tokenization gateway",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        return JSONResponse(
            content={
                "status": "healthy",
                "app_name": settings.app_name,
                "version": settings.app_version,
                "env": settings.env,
            }
        )

    app.include_router(process.router)
    app.include_router(external_function.router)
    app.include_router(health.router, prefix="/api", tags=["Health"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vault_gateway.interfaces.api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.reload,
        log_level=default_settings.log_level.lower(),
    )
