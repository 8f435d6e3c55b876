"""后端工厂与 stub 后端单元测试"""

import pytest

from vault_gateway.domain.exceptions import VaultBackendError
from vault_gateway.domain.ports.vault_backend import (
    DetokenizeItem,
    DetokenizeOptions,
    InsertOptions,
)
from vault_gateway.domain.value_objects.client_key import ClientKey
from vault_gateway.domain.value_objects.credentials import ApiKeyCredentials
from vault_gateway.domain.value_objects.redaction_type import RedactionType
from vault_gateway.infrastructure.adapters import create_vault_client_factory
from vault_gateway.infrastructure.adapters.skyflow_httpx_adapter import SkyflowVaultClient
from vault_gateway.infrastructure.adapters.vault_stub_adapter import (
    StubVaultBackend,
    StubVaultClientFactory,
)
from tests.conftest import make_settings

KEY = ClientKey("cluster-1", "vault-1")


class TestCreateVaultClientFactory:
    def test_stub_backend(self) -> None:
        factory = create_vault_client_factory(make_settings(vault_backend="stub"))

        assert isinstance(factory, StubVaultClientFactory)
        assert isinstance(factory(KEY, ApiKeyCredentials("")), StubVaultBackend)

    @pytest.mark.asyncio
    async def test_skyflow_backend_uses_configured_timeout(self) -> None:
        factory = create_vault_client_factory(
            make_settings(vault_backend="skyflow", backend_timeout=5.0)
        )

        client = factory(KEY, ApiKeyCredentials("sky-key"))

        assert isinstance(client, SkyflowVaultClient)
        assert client._client.timeout.read == 5.0
        await client.aclose()


class TestStubVaultBackend:
    """测试内存后端行为"""

    @pytest.mark.asyncio
    async def test_unknown_token_without_continue_on_error_fails(self) -> None:
        backend = StubVaultBackend(KEY)

        with pytest.raises(VaultBackendError) as exc_info:
            await backend.detokenize(
                [DetokenizeItem("tok-missing")], DetokenizeOptions(continue_on_error=False)
            )

        assert exc_info.value.http_code == 404

    @pytest.mark.asyncio
    async def test_redacted_values(self) -> None:
        backend = StubVaultBackend(KEY)
        inserted = await backend.insert("users", [{"ssn": "123456789"}], InsertOptions())
        token = inserted.inserted_fields[0]["ssn"]

        response = await backend.detokenize(
            [DetokenizeItem(token, RedactionType.REDACTED)], DetokenizeOptions()
        )

        assert response.detokenized_fields == [{"token": token, "value": "*REDACTED*"}]

    @pytest.mark.asyncio
    async def test_injected_failure_on_nth_call(self) -> None:
        backend = StubVaultBackend(KEY, fail_on_call=2)

        await backend.insert("users", [{"a": 1}], InsertOptions())
        with pytest.raises(VaultBackendError, match="Injected vault failure"):
            await backend.insert("users", [{"a": 2}], InsertOptions())

        assert len(backend.calls_for("insert")) == 2
