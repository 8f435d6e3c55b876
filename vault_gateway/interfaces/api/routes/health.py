"""健康检查端点

提供服务与客户端缓存的健康检查
"""

from fastapi import APIRouter, Depends

from vault_gateway.interfaces.api.container import ApiContainer
from vault_gateway.interfaces.api.dependencies.container import get_container

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/")
async def health_check(container: ApiContainer = Depends(get_container)) -> dict[str, str]:
    """基本健康检查"""
    return {
        "status": "healthy",
        "service": container.settings.app_name,
    }


@router.get("/version")
async def version_info(container: ApiContainer = Depends(get_container)) -> dict[str, str]:
    """版本信息"""
    settings = container.settings
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.env,
    }


@router.get("/cache")
async def client_cache_stats(container: ApiContainer = Depends(get_container)) -> dict:
    """客户端缓存统计"""
    return {
        "backend": container.settings.vault_backend,
        "max_size": container.settings.client_cache_max_size,
        **container.client_cache.stats,
    }
