"""Header Utilities

请求头的大小写不敏感读取与前缀剥离。全部是作用于普通映射的纯函数，
不依赖具体 Web 框架的 header 类型。

行索引调用方（数据仓库 external function）会给所有自定义请求头加上固定前缀，
例如 X-Skyflow-Operation 实际以 sf-custom-X-Skyflow-Operation 发送。
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from vault_gateway.domain.exceptions import ConfigError
from vault_gateway.domain.value_objects.client_key import ClientKey, VaultTarget
from vault_gateway.domain.value_objects.vault_environment import VaultEnvironment

HEADER_OPERATION = "x-skyflow-operation"
HEADER_CLUSTER_ID = "x-skyflow-cluster-id"
HEADER_VAULT_ID = "x-skyflow-vault-id"
HEADER_TABLE = "x-skyflow-table"
HEADER_ENV = "x-skyflow-env"
HEADER_COLUMN_NAME = "x-skyflow-column-name"
HEADER_REDACTION_TYPE = "x-skyflow-redaction-type"

ROW_INDEXED_PREFIX = "sf-custom-"

HeaderSource = Mapping[str, str] | Iterable[tuple[str, str]] | None


def normalize_headers(headers: HeaderSource) -> dict[str, str]:
    """返回键名小写的新字典（同名头以最后一次出现为准）"""
    if not headers:
        return {}
    items = headers.items() if isinstance(headers, Mapping) else headers
    return {str(name).lower(): value for name, value in items}


def strip_prefix(headers: HeaderSource, prefix: str) -> dict[str, str]:
    """只保留带前缀的头并去掉前缀（大小写不敏感）"""
    prefix = prefix.lower()
    return {
        name[len(prefix) :]: value
        for name, value in normalize_headers(headers).items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }


def get_header(headers: HeaderSource, name: str, prefix: str = "") -> str | None:
    """大小写不敏感地读取一个头；不存在或为空串时返回 None

    示例：
        >>> get_header({"X-Skyflow-Operation": "tokenize"}, "x-skyflow-operation")
        'tokenize'
        >>> get_header({"sf-custom-X-Skyflow-Vault-ID": "v1"}, "X-Skyflow-Vault-ID", prefix="sf-custom-")
        'v1'
    """
    source = strip_prefix(headers, prefix) if prefix else normalize_headers(headers)
    value = source.get(name.lower())
    return value if value else None


@dataclass(frozen=True)
class RequestHeaderConfig:
    """从请求头提取的操作配置"""

    operation: str | None = None
    cluster_id: str | None = None
    vault_id: str | None = None
    table: str | None = None
    env: str | None = None
    column_name: str | None = None
    redaction_type: str | None = None

    def target(self) -> VaultTarget:
        """构造请求目标

        异常：
            ConfigError: 缺少 cluster / vault 头，或环境值非法
        """
        if not self.cluster_id:
            raise ConfigError("Missing required header: X-Skyflow-Cluster-ID")
        if not self.vault_id:
            raise ConfigError("Missing required header: X-Skyflow-Vault-ID")
        key = ClientKey(
            cluster_id=self.cluster_id,
            vault_id=self.vault_id,
            env=VaultEnvironment.parse(self.env),
        )
        return VaultTarget(key=key, table=self.table)


def parse_request_config(headers: HeaderSource, prefix: str = "") -> RequestHeaderConfig:
    """提取全部配置头；prefix 非空时只识别带该前缀的头"""
    source = strip_prefix(headers, prefix) if prefix else normalize_headers(headers)

    def read(name: str) -> str | None:
        value = source.get(name)
        return value.strip() if value and value.strip() else None

    return RequestHeaderConfig(
        operation=read(HEADER_OPERATION),
        cluster_id=read(HEADER_CLUSTER_ID),
        vault_id=read(HEADER_VAULT_ID),
        table=read(HEADER_TABLE),
        env=read(HEADER_ENV),
        column_name=read(HEADER_COLUMN_NAME),
        redaction_type=read(HEADER_REDACTION_TYPE),
    )
