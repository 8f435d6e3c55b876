"""Pytest 配置文件 - 全局 fixtures"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from vault_gateway.application.services.client_cache import VaultClientCache
from vault_gateway.config import Settings
from vault_gateway.domain.value_objects.credentials import ApiKeyCredentials
from vault_gateway.infrastructure.adapters.vault_stub_adapter import StubVaultClientFactory
from vault_gateway.infrastructure.config.credentials_loader import CredentialsConfig
from vault_gateway.interfaces.api.container import ApiContainer
from vault_gateway.interfaces.api.main import build_container, create_app


def make_settings(**overrides) -> Settings:
    """测试配置：stub 后端，不读取 .env 与凭证文件"""
    values = {
        "vault_backend": "stub",
        "env": "test",
        "skyflow_api_key": "",
        "skyflow_client_id": "",
        "skyflow_credentials_file": "does-not-exist.json",
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def stub_factory() -> StubVaultClientFactory:
    """记录每个 (cluster, vault, env) 构造出的 stub 后端"""
    return StubVaultClientFactory()


@pytest.fixture
def client_cache(stub_factory: StubVaultClientFactory) -> VaultClientCache:
    return VaultClientCache(ApiKeyCredentials(api_key="sky-test"), stub_factory)


@pytest.fixture
def container(settings: Settings, stub_factory: StubVaultClientFactory) -> ApiContainer:
    return build_container(
        settings,
        client_factory=stub_factory,
        credentials_config=CredentialsConfig(credentials=ApiKeyCredentials(api_key="sky-test")),
    )


@pytest.fixture
def client(container: ApiContainer) -> TestClient:
    """FastAPI 测试客户端（stub 后端）"""
    return TestClient(create_app(container=container))


@pytest.fixture
def vault_headers() -> dict[str, str]:
    """标准端点的目标请求头"""
    return {
        "X-Skyflow-Cluster-ID": "cluster-1",
        "X-Skyflow-Vault-ID": "vault-1",
        "X-Skyflow-Env": "SANDBOX",
    }


@pytest.fixture(autouse=True)
def block_real_http_calls(request):
    """单元测试禁止真实网络请求

    - 单元测试通过 httpx.MockTransport 注入响应，任何落到真实传输层的请求都直接失败
    - 集成测试使用 stub 后端，不需要拦截
    """
    test_path = str(request.fspath)
    is_unit_test = "tests/unit" in test_path or "tests\\unit" in test_path

    if not is_unit_test:
        yield
        return

    with patch.object(
        httpx.AsyncHTTPTransport,
        "handle_async_request",
        new=AsyncMock(side_effect=httpx.ConnectError("real network disabled in unit tests")),
    ):
        yield
