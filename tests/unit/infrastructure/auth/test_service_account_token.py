"""Service Account token 服务单元测试

使用测试内生成的 RSA 密钥签名，httpx.MockTransport 模拟 tokenURI。
"""

import json

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from vault_gateway.domain.exceptions import ConfigError, VaultBackendError
from vault_gateway.domain.value_objects.credentials import ServiceAccountCredentials
from vault_gateway.infrastructure.auth.service_account_token import (
    GRANT_TYPE,
    ServiceAccountTokenSource,
    StaticTokenSource,
)

TOKEN_URI = "https://manage.example.com/v1/auth/sa/oauth/token"
NOW = 1_700_000_000


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def credentials(rsa_key) -> ServiceAccountCredentials:
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    return ServiceAccountCredentials(
        client_id="client-1",
        client_name="gateway",
        token_uri=TOKEN_URI,
        key_id="key-1",
        private_key=pem,
        context={"functionName": "fn"},
    )


SERVER_SECRET = "server-secret-for-tests-0123456789abcdef"


def access_token(exp: int) -> str:
    return jwt.encode({"sub": "client-1", "exp": exp}, SERVER_SECRET, algorithm="HS256")


class Clock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TokenEndpoint:
    """记录请求，依次返回预设的 accessToken"""

    def __init__(self, *tokens: str, status_code: int = 200):
        self.tokens = list(tokens)
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": {"message": "denied"}})
        return httpx.Response(200, json={"accessToken": self.tokens.pop(0), "tokenType": "Bearer"})


class TestStaticTokenSource:
    @pytest.mark.asyncio
    async def test_returns_api_key(self) -> None:
        assert await StaticTokenSource("sky-key").get_token() == "sky-key"


class TestServiceAccountAssertion:
    def test_assertion_signed_with_service_account_key(self, credentials, rsa_key) -> None:
        source = ServiceAccountTokenSource(credentials, clock=Clock(NOW))

        assertion = source.create_assertion()

        claims = jwt.decode(
            assertion,
            rsa_key.public_key(),
            algorithms=["RS256"],
            audience=TOKEN_URI,
            options={"verify_exp": False},
        )
        assert claims["iss"] == claims["sub"] == "client-1"
        assert claims["key"] == "key-1"
        assert claims["exp"] == NOW + 3600
        assert claims["ctx"] == {"functionName": "fn"}

    def test_invalid_private_key_is_config_error(self) -> None:
        broken = ServiceAccountCredentials(
            client_id="c", client_name="n", token_uri=TOKEN_URI, key_id="k", private_key="not a pem"
        )

        with pytest.raises(ConfigError, match="Invalid service account private key"):
            ServiceAccountTokenSource(broken)


class TestServiceAccountTokenExchange:
    """测试 token 换取与缓存"""

    @pytest.mark.asyncio
    async def test_token_exchanged_with_jwt_bearer_grant(self, credentials) -> None:
        endpoint = TokenEndpoint(access_token(NOW + 3600))
        source = ServiceAccountTokenSource(
            credentials, transport=httpx.MockTransport(endpoint), clock=Clock(NOW)
        )

        token = await source.get_token()

        assert token == access_token(NOW + 3600)
        body = json.loads(endpoint.requests[0].content)
        assert body["grant_type"] == GRANT_TYPE
        assert str(endpoint.requests[0].url) == TOKEN_URI

    @pytest.mark.asyncio
    async def test_token_cached_until_refresh_margin(self, credentials) -> None:
        """测试：过期前 60 秒内才重新换取"""
        first, second = access_token(NOW + 3600), access_token(NOW + 7200)
        endpoint = TokenEndpoint(first, second)
        clock = Clock(NOW)
        source = ServiceAccountTokenSource(
            credentials, transport=httpx.MockTransport(endpoint), clock=clock
        )

        assert await source.get_token() == first
        clock.now = NOW + 3000
        assert await source.get_token() == first
        clock.now = NOW + 3550
        assert await source.get_token() == second
        assert len(endpoint.requests) == 2

    @pytest.mark.asyncio
    async def test_rejected_exchange_raises_backend_error(self, credentials) -> None:
        endpoint = TokenEndpoint(status_code=401)
        source = ServiceAccountTokenSource(credentials, transport=httpx.MockTransport(endpoint))

        with pytest.raises(VaultBackendError) as exc_info:
            await source.get_token()

        assert exc_info.value.http_code == 401

    @pytest.mark.asyncio
    async def test_network_failure_raises_backend_error(self, credentials) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = ServiceAccountTokenSource(credentials, transport=httpx.MockTransport(handler))

        with pytest.raises(VaultBackendError) as exc_info:
            await source.get_token()

        assert exc_info.value.http_code == 502

    @pytest.mark.asyncio
    async def test_missing_access_token_raises_backend_error(self, credentials) -> None:
        source = ServiceAccountTokenSource(
            credentials,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )

        with pytest.raises(VaultBackendError, match="no accessToken"):
            await source.get_token()
