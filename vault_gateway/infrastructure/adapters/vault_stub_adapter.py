"""Vault Stub Adapter - 内存 vault 实现.

职责:
- 在内存中模拟 insert / detokenize / query
- 记录每次收到的请求载荷, 供测试断言
- 支持按调用序号注入失败

适用场景:
- 单元 / 集成测试(结果可断言)
- 本地开发(VAULT_BACKEND=stub)
- 无网络环境测试
"""

import re
import uuid
from typing import Any

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
from vault_gateway.domain.value_objects.credentials import Credentials
from vault_gateway.domain.value_objects.redaction_type import RedactionType

_SELECT_PATTERN = re.compile(
    r"^\s*select\s+\*\s+from\s+(?P<table>\w+)"
    r"(?:\s+where\s+(?P<column>\w+)\s*=\s*'(?P<value>[^']*)')?\s*;?\s*$",
    re.IGNORECASE,
)


def _redact(value: Any, redaction_type: RedactionType | None) -> Any:
    if redaction_type is RedactionType.REDACTED:
        return "*REDACTED*"
    if redaction_type is RedactionType.MASKED:
        text = str(value)
        return "*" * max(len(text) - 4, 0) + text[-4:]
    return value


class StubVaultBackend:
    """VaultBackendPort 内存实现。

    属性:
        calls: 收到的请求列表, 每项为 {"method": ..., **请求载荷}
        fail_on_call: 第 N 次调用(从 1 开始)抛出 failure
    """

    def __init__(
        self,
        key: ClientKey | None = None,
        *,
        fail_on_call: int | None = None,
        failure: VaultBackendError | None = None,
    ) -> None:
        self.key = key
        self.fail_on_call = fail_on_call
        self.failure = failure
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        # table -> skyflow_id -> {"fields": {...}, "tokens": {...}}
        self._tables: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
        # token -> (table, skyflow_id, column)
        self._token_index: dict[str, tuple[str, str, str]] = {}

    def _record_call(self, method: str, payload: dict[str, Any]) -> None:
        self.calls.append({"method": method, **payload})
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.failure or VaultBackendError("Injected vault failure", http_code=500)

    def calls_for(self, method: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["method"] == method]

    def _find_by_column(self, table: str, column: str, value: Any) -> str | None:
        for skyflow_id, row in self._tables.get(table, {}).items():
            if row["fields"].get(column) == value:
                return skyflow_id
        return None

    async def insert(
        self, table: str, records: list[dict[str, Any]], options: InsertOptions
    ) -> InsertResponse:
        self._record_call(
            "insert",
            {
                "table": table,
                "records": [dict(r) for r in records],
                "upsert": options.upsert_column,
                "tokens": options.tokens,
                "continue_on_error": options.continue_on_error,
            },
        )
        rows = self._tables.setdefault(table, {})
        inserted: list[dict[str, Any]] = []
        for index, fields in enumerate(records):
            skyflow_id = None
            if options.upsert_column and options.upsert_column in fields:
                skyflow_id = self._find_by_column(table, options.upsert_column, fields[options.upsert_column])
            if skyflow_id is None:
                skyflow_id = str(uuid.uuid4())
                rows[skyflow_id] = {"fields": {}, "tokens": {}}
            row = rows[skyflow_id]

            custom = options.tokens[index] if options.token_mode and options.tokens else {}
            for column, value in fields.items():
                row["fields"][column] = value
                if column in custom:
                    row["tokens"][column] = custom[column]
                elif column not in row["tokens"]:
                    row["tokens"][column] = f"tok-{uuid.uuid4().hex}"
                self._token_index[row["tokens"][column]] = (table, skyflow_id, column)

            result: dict[str, Any] = {"skyflow_id": skyflow_id}
            if options.return_tokens:
                result.update({column: row["tokens"][column] for column in fields})
            inserted.append(result)
        return InsertResponse(inserted_fields=inserted)

    async def detokenize(
        self, items: list[DetokenizeItem], options: DetokenizeOptions
    ) -> DetokenizeResponse:
        parameters = []
        for item in items:
            parameter: dict[str, Any] = {"token": item.token}
            if item.redaction_type is not None:
                parameter["redaction"] = item.redaction_type.value
            parameters.append(parameter)
        self._record_call(
            "detokenize",
            {"detokenizationParameters": parameters, "continueOnError": options.continue_on_error},
        )

        fields: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for item in items:
            location = self._token_index.get(item.token)
            if location is None:
                if not options.continue_on_error:
                    raise VaultBackendError(f"Token not found: {item.token}", http_code=404, grpc_code=5)
                errors.append({"token": item.token, "error": "Token not found"})
                continue
            table, skyflow_id, column = location
            value = self._tables[table][skyflow_id]["fields"][column]
            fields.append({"token": item.token, "value": _redact(value, item.redaction_type)})
        return DetokenizeResponse(detokenized_fields=fields, errors=errors or None)

    async def query(self, sql: str) -> QueryResponse:
        self._record_call("query", {"query": sql})
        match = _SELECT_PATTERN.match(sql)
        if match is None:
            raise VaultBackendError(
                "Only SELECT * FROM <table> [WHERE column = 'value'] is supported",
                http_code=400,
                grpc_code=3,
            )
        rows = []
        for skyflow_id, row in self._tables.get(match["table"], {}).items():
            if match["column"] and str(row["fields"].get(match["column"])) != match["value"]:
                continue
            rows.append({**row["fields"], "skyflow_id": skyflow_id, "tokenizedData": {}})
        return QueryResponse(fields=rows)

    async def aclose(self) -> None:
        self.closed = True


class StubVaultClientFactory:
    """为每个 ClientKey 构造一个 StubVaultBackend, 并保留构造记录"""

    def __init__(self, **backend_options: Any) -> None:
        self.backend_options = backend_options
        self.created: dict[str, StubVaultBackend] = {}

    def __call__(self, key: ClientKey, credentials: Credentials) -> StubVaultBackend:
        backend = StubVaultBackend(key, **self.backend_options)
        self.created[key.cache_key] = backend
        return backend
