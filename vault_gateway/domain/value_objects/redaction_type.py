"""RedactionType 枚举 - detokenize 的脱敏模式

调用方不指定时，由后端治理策略决定脱敏方式，网关不会在本地补默认值。
"""

from enum import Enum


class RedactionType(str, Enum):
    """脱敏模式枚举"""

    PLAIN_TEXT = "PLAIN_TEXT"  # 明文
    MASKED = "MASKED"  # 部分遮盖
    REDACTED = "REDACTED"  # 完全遮盖
    DEFAULT = "DEFAULT"  # 使用列上配置的默认脱敏

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
