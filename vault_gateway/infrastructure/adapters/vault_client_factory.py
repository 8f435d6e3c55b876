"""Vault client factory - 根据配置选择后端实现"""

from functools import partial

from vault_gateway.config import Settings
from vault_gateway.domain.ports.vault_backend import VaultClientFactory
from vault_gateway.infrastructure.adapters.skyflow_httpx_adapter import SkyflowVaultClient
from vault_gateway.infrastructure.adapters.vault_stub_adapter import StubVaultClientFactory


def create_vault_client_factory(settings: Settings) -> VaultClientFactory:
    """返回客户端缓存使用的句柄工厂

    - skyflow: SkyflowVaultClient（httpx REST）
    - stub: StubVaultBackend（内存）
    """
    if settings.vault_backend == "stub":
        return StubVaultClientFactory()
    return partial(SkyflowVaultClient, timeout=settings.backend_timeout)
