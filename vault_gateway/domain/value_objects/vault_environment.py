"""VaultEnvironment 枚举 - 后端环境

业务定义：
- 每个 vault 客户端都绑定一个环境：SANDBOX（沙箱）或 PROD（生产）
- 请求未指定环境时默认使用 PROD
"""

from enum import Enum

from vault_gateway.domain.exceptions import ConfigError


class VaultEnvironment(str, Enum):
    """后端环境枚举"""

    SANDBOX = "SANDBOX"
    PROD = "PROD"

    @classmethod
    def parse(cls, value: "str | VaultEnvironment | None") -> "VaultEnvironment":
        """解析环境值（大小写不敏感），空值回退到 PROD

        异常：
            ConfigError: 不是可识别的环境值
        """
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.PROD
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ConfigError(f"Invalid environment: {value}. Must be one of: {valid}") from None
