"""ClientKey / VaultTarget 值对象

ClientKey 唯一标识一个后端客户端句柄：(cluster, vault, environment)。
两个三元组相同的请求必须复用同一个句柄。
"""

from dataclasses import dataclass

from vault_gateway.domain.value_objects.vault_environment import VaultEnvironment


@dataclass(frozen=True, slots=True)
class ClientKey:
    """客户端缓存键"""

    cluster_id: str
    vault_id: str
    env: VaultEnvironment = VaultEnvironment.PROD

    @property
    def cache_key(self) -> str:
        """拼接形式，只用于日志与展示；缓存以 ClientKey 本身为键"""
        return f"{self.cluster_id}:{self.vault_id}:{self.env.value}"

    def __str__(self) -> str:
        return f"cluster={self.cluster_id}, vault={self.vault_id}, env={self.env.value}"


@dataclass(frozen=True, slots=True)
class VaultTarget:
    """一次请求的目标：客户端键 + 可选的表名（tokenize 类操作需要）"""

    key: ClientKey
    table: str | None = None
