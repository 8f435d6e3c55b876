"""Skyflow Vault Httpx Adapter - 真实 vault REST 调用实现.

职责:
- 使用 httpx 调用 vault 的 insert / detokenize / query 接口
- 把 vault 的响应形态转换为 Domain Port 定义的响应对象
- 把 HTTP 错误、超时、网络错误统一转换为 VaultBackendError

一个实例对应一个 (cluster, vault, env) 三元组, 由客户端缓存持有并跨请求复用.
"""

import logging
from typing import Any

import httpx

from vault_gateway.domain.exceptions import VaultBackendError
from vault_gateway.domain.ports.vault_backend import (
    DetokenizeItem,
    DetokenizeOptions,
    DetokenizeResponse,
    InsertOptions,
    InsertResponse,
    QueryResponse,
)
from vault_gateway.domain.value_objects.client_key import ClientKey
from vault_gateway.domain.value_objects.credentials import (
    Credentials,
    ServiceAccountCredentials,
)
from vault_gateway.domain.value_objects.vault_environment import VaultEnvironment
from vault_gateway.infrastructure.auth.service_account_token import (
    ServiceAccountTokenSource,
    StaticTokenSource,
)

logger = logging.getLogger(__name__)

VAULT_DOMAINS = {
    VaultEnvironment.PROD: "vault.skyflowapis.com",
    VaultEnvironment.SANDBOX: "vault.skyflowapis-preview.com",
}


def vault_url(key: ClientKey) -> str:
    return f"https://{key.cluster_id}.{VAULT_DOMAINS[key.env]}"


def build_token_source(
    credentials: Credentials,
    *,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> StaticTokenSource | ServiceAccountTokenSource:
    if isinstance(credentials, ServiceAccountCredentials):
        return ServiceAccountTokenSource(credentials, timeout=timeout, transport=transport)
    return StaticTokenSource(credentials.api_key)


def _backend_error(response: httpx.Response) -> VaultBackendError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {"message": error} if isinstance(error, str) else {}
    return VaultBackendError(
        error.get("message") or response.text[:200] or f"HTTP {response.status_code}",
        http_code=error.get("http_code") or response.status_code,
        grpc_code=error.get("grpc_code"),
        details=error.get("details"),
        request_id=response.headers.get("x-request-id"),
    )


def _inserted_record(record: dict[str, Any]) -> dict[str, Any]:
    return {"skyflow_id": record.get("skyflow_id"), **(record.get("tokens") or {})}


class SkyflowVaultClient:
    """Vault REST 客户端 - VaultBackendPort 的生产实现."""

    def __init__(
        self,
        key: ClientKey,
        credentials: Credentials,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.key = key
        self.base_url = vault_url(key)
        self._token_source = build_token_source(credentials, timeout=timeout, transport=transport)
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        token = await self._token_source.get_token()
        try:
            response = await self._client.post(
                path,
                json=payload,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise VaultBackendError(f"Vault request timed out: POST {path}", http_code=504) from e
        except httpx.HTTPError as e:
            raise VaultBackendError(f"Network error for POST {path}: {e}", http_code=502) from e

        if response.status_code >= 400:
            raise _backend_error(response)
        return response.json()

    async def insert(
        self, table: str, records: list[dict[str, Any]], options: InsertOptions
    ) -> InsertResponse:
        if options.continue_on_error:
            return await self._insert_continue_on_error(table, records, options)

        payload: dict[str, Any] = {
            "records": self._record_payloads(records, options),
            "tokenization": options.return_tokens,
        }
        if options.upsert_column:
            payload["upsert"] = options.upsert_column
        if options.token_mode:
            payload["byot"] = "ENABLE"

        body = await self._post(f"/v1/vaults/{self.key.vault_id}/{table}", payload)
        return InsertResponse(
            inserted_fields=[_inserted_record(r) for r in body.get("records") or []]
        )

    async def _insert_continue_on_error(
        self, table: str, records: list[dict[str, Any]], options: InsertOptions
    ) -> InsertResponse:
        # batch 接口：每条记录是独立的子请求，单条失败不影响其他记录
        sub_requests = []
        for record in self._record_payloads(records, options):
            sub_request = {
                **record,
                "tableName": table,
                "method": "POST",
                "tokenization": options.return_tokens,
            }
            if options.upsert_column:
                sub_request["upsert"] = options.upsert_column
            sub_requests.append(sub_request)
        payload: dict[str, Any] = {"records": sub_requests, "continueOnError": True}
        if options.token_mode:
            payload["byot"] = "ENABLE"

        body = await self._post(f"/v1/vaults/{self.key.vault_id}", payload)
        inserted: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for index, item in enumerate(body.get("responses") or []):
            item_body = item.get("Body") or {}
            if (item.get("Status") or 200) >= 400 or "error" in item_body:
                errors.append(
                    {
                        "request_index": index,
                        "http_code": item.get("Status"),
                        "error": item_body.get("error"),
                    }
                )
                continue
            inserted.extend(_inserted_record(r) for r in item_body.get("records") or [])
        return InsertResponse(inserted_fields=inserted, errors=errors or None)

    @staticmethod
    def _record_payloads(
        records: list[dict[str, Any]], options: InsertOptions
    ) -> list[dict[str, Any]]:
        payloads: list[dict[str, Any]] = []
        for index, fields in enumerate(records):
            record: dict[str, Any] = {"fields": fields}
            if options.token_mode and options.tokens is not None:
                record["tokens"] = options.tokens[index]
            payloads.append(record)
        return payloads

    async def detokenize(
        self, items: list[DetokenizeItem], options: DetokenizeOptions
    ) -> DetokenizeResponse:
        parameters = []
        for item in items:
            parameter: dict[str, Any] = {"token": item.token}
            # 只有显式指定时才携带 redaction，否则由后端治理策略决定
            if item.redaction_type is not None:
                parameter["redaction"] = item.redaction_type.value
            parameters.append(parameter)

        body = await self._post(
            f"/v1/vaults/{self.key.vault_id}/detokenize",
            {
                "detokenizationParameters": parameters,
                "downloadURL": False,
                "continueOnError": options.continue_on_error,
            },
        )
        fields: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for record in body.get("records") or []:
            if record.get("error"):
                errors.append({"token": record.get("token"), "error": record["error"]})
            else:
                fields.append({"token": record.get("token"), "value": record.get("value")})
        return DetokenizeResponse(detokenized_fields=fields, errors=errors or None)

    async def query(self, sql: str) -> QueryResponse:
        body = await self._post(f"/v1/vaults/{self.key.vault_id}/query", {"query": sql})
        rows = [
            {**(record.get("fields") or {}), "tokenizedData": record.get("tokens") or {}}
            for record in body.get("records") or []
        ]
        return QueryResponse(fields=rows)

    async def aclose(self) -> None:
        await self._client.aclose()
