"""Infrastructure Adapters Package

提供 VaultBackendPort 的 Infrastructure 层适配器实现。
遵循 Ports and Adapters 架构模式。
"""

from vault_gateway.infrastructure.adapters.skyflow_httpx_adapter import SkyflowVaultClient
from vault_gateway.infrastructure.adapters.vault_client_factory import create_vault_client_factory
from vault_gateway.infrastructure.adapters.vault_stub_adapter import (
    StubVaultBackend,
    StubVaultClientFactory,
)

__all__ = [
    "SkyflowVaultClient",
    "StubVaultBackend",
    "StubVaultClientFactory",
    "create_vault_client_factory",
]
