"""VaultOperation 枚举 - 网关支持的操作"""

from enum import Enum

from vault_gateway.domain.exceptions import ConfigError


class VaultOperation(str, Enum):
    """网关操作枚举

    值即请求头 X-Skyflow-Operation 中使用的名称。
    """

    TOKENIZE = "tokenize"
    TOKENIZE_BYOT = "tokenize-byot"  # 使用调用方自带的 token（Bring Your Own Token）
    DETOKENIZE = "detokenize"
    QUERY = "query"

    @property
    def requires_table(self) -> bool:
        return self in (VaultOperation.TOKENIZE, VaultOperation.TOKENIZE_BYOT)

    @classmethod
    def parse(
        cls,
        value: str | None,
        supported: "tuple[VaultOperation, ...] | None" = None,
    ) -> "VaultOperation":
        """解析操作名（大小写不敏感）

        参数：
            value: 请求头中的操作名
            supported: 允许的操作子集（默认全部）

        异常：
            ConfigError: 操作名缺失或不被支持
        """
        allowed = supported or tuple(cls)
        names = ", ".join(op.value for op in allowed)
        normalized = (value or "").strip().lower()
        if not normalized:
            raise ConfigError(f"Missing required header: X-Skyflow-Operation (must be one of: {names})")
        for op in allowed:
            if op.value == normalized:
                return op
        raise ConfigError(
            f"Unknown operation: {normalized}. "
            f"Supported operations (via X-Skyflow-Operation header): {names}"
        )
