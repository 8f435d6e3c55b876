"""Service Account bearer token 服务

职责：
1. 用 Service Account 私钥签发 RS256 断言（JWT）
2. 用断言向 tokenURI 换取 bearer token
3. 缓存 token，过期前 60 秒刷新

私钥在构造时解析一次；同一句柄的并发请求通过 asyncio.Lock 只换取一次 token。
"""

import asyncio
import logging
import time
from collections.abc import Callable

import httpx
import jwt
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from vault_gateway.domain.exceptions import ConfigError, VaultBackendError
from vault_gateway.domain.value_objects.credentials import ServiceAccountCredentials

logger = logging.getLogger(__name__)

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_TTL_SECONDS = 3600
REFRESH_MARGIN_SECONDS = 60


class StaticTokenSource:
    """API Key 直接作为 bearer token"""

    def __init__(self, api_key: str):
        self._api_key = api_key

    async def get_token(self) -> str:
        return self._api_key


class ServiceAccountTokenSource:
    """Service Account token 来源

    示例：
        >>> source = ServiceAccountTokenSource(credentials)
        >>> token = await source.get_token()
    """

    def __init__(
        self,
        credentials: ServiceAccountCredentials,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport
        self._clock = clock
        self._lock = asyncio.Lock()
        self._token: str | None = None
        self._expires_at = 0.0
        try:
            self._signing_key = load_pem_private_key(
                credentials.private_key.encode("utf-8"), password=None
            )
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid service account private key: {e}") from None

    def create_assertion(self, now: float | None = None) -> str:
        """签发 RS256 断言"""
        issued_at = int(self._clock() if now is None else now)
        claims: dict = {
            "iss": self._credentials.client_id,
            "key": self._credentials.key_id,
            "aud": self._credentials.token_uri,
            "sub": self._credentials.client_id,
            "exp": issued_at + ASSERTION_TTL_SECONDS,
        }
        if self._credentials.context:
            claims["ctx"] = self._credentials.context
        return jwt.encode(claims, self._signing_key, algorithm="RS256")

    async def get_token(self) -> str:
        async with self._lock:
            now = self._clock()
            if self._token and now < self._expires_at - REFRESH_MARGIN_SECONDS:
                return self._token
            self._token, self._expires_at = await self._request_token(now)
            return self._token

    async def _request_token(self, now: float) -> tuple[str, float]:
        logger.info("Requesting bearer token for client %s", self._credentials.client_name)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._credentials.token_uri,
                    json={"grant_type": GRANT_TYPE, "assertion": self.create_assertion(now)},
                )
        except httpx.TimeoutException as e:
            raise VaultBackendError("Bearer token request timed out", http_code=504) from e
        except httpx.HTTPError as e:
            raise VaultBackendError(f"Bearer token request failed: {e}", http_code=502) from e

        if response.status_code >= 400:
            raise VaultBackendError(
                f"Failed to obtain bearer token (HTTP {response.status_code})",
                http_code=response.status_code,
                request_id=response.headers.get("x-request-id"),
            )

        access_token = response.json().get("accessToken")
        if not access_token:
            raise VaultBackendError("Token endpoint returned no accessToken", http_code=502)

        try:
            claims = jwt.decode(access_token, options={"verify_signature": False})
            expires_at = float(claims.get("exp", now + ASSERTION_TTL_SECONDS))
        except jwt.PyJWTError:
            expires_at = now + ASSERTION_TTL_SECONDS
        return access_token, expires_at
