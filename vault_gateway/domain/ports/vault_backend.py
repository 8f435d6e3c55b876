"""Vault 后端抽象接口(Domain Port) - 隔离网关与具体的 vault SDK / REST 实现.

职责:
- 定义 insert / detokenize / query 三个后端调用的请求与响应形态
- 隔离 httpx REST 客户端、内存 stub 等具体实现

设计原则:
- 使用 Protocol 实现结构化子类型
- 不依赖任何具体 HTTP 库
- 后端失败统一抛出 VaultBackendError
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from vault_gateway.domain.value_objects.client_key import ClientKey
from vault_gateway.domain.value_objects.credentials import Credentials
from vault_gateway.domain.value_objects.redaction_type import RedactionType


@dataclass
class InsertOptions:
    """insert 选项

    属性:
        return_tokens: 是否返回 token
        upsert_column: upsert 所依据的唯一列（只支持单列）
        continue_on_error: 单条失败时是否继续处理其余记录
        token_mode: 是否启用自带 token（BYOT）
        tokens: BYOT 模式下与 records 一一对应的 token 映射
    """

    return_tokens: bool = True
    upsert_column: str | None = None
    continue_on_error: bool = False
    token_mode: bool = False
    tokens: list[dict[str, Any]] | None = None


@dataclass
class InsertResponse:
    inserted_fields: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] | None = None


@dataclass(frozen=True)
class DetokenizeItem:
    """单个 detokenize 请求项

    redaction_type 为 None 时请求中不携带 redaction 字段，由后端治理策略决定。
    """

    token: str
    redaction_type: RedactionType | None = None


@dataclass
class DetokenizeOptions:
    continue_on_error: bool = True


@dataclass
class DetokenizeResponse:
    detokenized_fields: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] | None = None


@dataclass
class QueryResponse:
    fields: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] | None = None


class VaultBackendPort(Protocol):
    """Vault 后端抽象接口(Domain Port).

    一个实例对应一个 (cluster, vault, env) 三元组，由客户端缓存持有。
    """

    async def insert(
        self, table: str, records: list[dict[str, Any]], options: InsertOptions
    ) -> InsertResponse:
        """插入记录并返回 token.

        异常:
            VaultBackendError: 后端调用失败
        """
        ...

    async def detokenize(
        self, items: list[DetokenizeItem], options: DetokenizeOptions
    ) -> DetokenizeResponse:
        """把 token 还原为值.

        异常:
            VaultBackendError: 后端调用失败
        """
        ...

    async def query(self, sql: str) -> QueryResponse:
        """执行只读 SQL 查询.

        异常:
            VaultBackendError: 后端调用失败
        """
        ...

    async def aclose(self) -> None:
        """释放底层连接"""
        ...


VaultClientFactory = Callable[[ClientKey, Credentials], VaultBackendPort]
