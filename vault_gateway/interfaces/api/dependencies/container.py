"""路由依赖：从 app.state 取出网关容器

容器在 lifespan 中构造（或由 create_app(container=...) 注入），
路由通过 Depends(get_container) 拿到网关门面、客户端缓存与配置。
"""

from __future__ import annotations

from fastapi import Request

from vault_gateway.interfaces.api.container import ApiContainer


def get_container(request: Request) -> ApiContainer:
    """返回当前应用的 ApiContainer

    异常：
        RuntimeError: lifespan 尚未执行，容器不存在
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Vault gateway container is not initialized (lifespan not executed).")
    return container
