"""
Vault Client Cache

按 (cluster, vault, environment) 三元组缓存后端客户端句柄：
- 未命中时用进程级凭证懒加载构造句柄
- 命中时直接复用，不重复构造（构造可能包含一次性的认证准备）
- 可选的 LRU 上限

句柄通过 lease() 借出，借出期间记录使用计数。
被淘汰的句柄在最后一个借用者归还后关闭；关闭前再次解析同一三元组会重新收回该句柄。

缓存对象由容器持有，生命周期等于进程生命周期。
"""

import logging
import threading
from collections import OrderedDict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from vault_gateway.domain.ports.vault_backend import VaultBackendPort, VaultClientFactory
from vault_gateway.domain.value_objects.client_key import ClientKey
from vault_gateway.domain.value_objects.credentials import Credentials
from vault_gateway.domain.value_objects.vault_environment import VaultEnvironment

logger = logging.getLogger(__name__)


@dataclass
class ClientCacheStats:
    """缓存指标"""

    hits: int = 0
    misses: int = 0
    constructions: int = 0
    evictions: int = 0
    closed: int = 0


class VaultClientCache:
    """
    后端客户端缓存

    Features:
        - check-and-create 在锁内完成，并发首次访问只构造一次
        - 以 ClientKey 本身为键，不同三元组永远不会共享句柄
        - 可选 LRU 淘汰（max_size=None 表示不淘汰）
        - 命中率统计

    Example:
        >>> cache = VaultClientCache(credentials, client_factory)
        >>> client = cache.resolve("cluster-1", "vault-1", "PROD")
        >>> client is cache.resolve("cluster-1", "vault-1", "PROD")
        True
    """

    def __init__(
        self,
        credentials: Credentials,
        client_factory: VaultClientFactory,
        max_size: int | None = None,
    ):
        """
        Args:
            credentials: 进程启动时确定的凭证
            client_factory: 根据 (ClientKey, Credentials) 构造句柄的工厂
            max_size: 最大句柄数，None 表示不限制
        """
        if max_size is not None and max_size <= 0:
            raise ValueError("max_size must be a positive integer or None")
        self._credentials = credentials
        self._factory = client_factory
        self._max_size = max_size
        self._clients: OrderedDict[ClientKey, VaultBackendPort] = OrderedDict()
        # 已淘汰、等待关闭的句柄
        self._evicted: dict[ClientKey, VaultBackendPort] = {}
        self._in_use: dict[ClientKey, int] = {}
        self._lock = threading.Lock()
        self._stats = ClientCacheStats()

    def resolve(
        self,
        cluster_id: str,
        vault_id: str,
        env: str | VaultEnvironment | None = VaultEnvironment.PROD,
    ) -> VaultBackendPort:
        """
        获取（必要时构造）三元组对应的客户端句柄

        Raises:
            ConfigError: env 不是可识别的环境值
        """
        key = ClientKey(cluster_id=cluster_id, vault_id=vault_id, env=VaultEnvironment.parse(env))
        return self.resolve_key(key)

    def resolve_key(self, key: ClientKey) -> VaultBackendPort:
        with self._lock:
            return self._resolve_locked(key)

    @asynccontextmanager
    async def lease(self, key: ClientKey) -> AsyncIterator[VaultBackendPort]:
        """借出句柄，退出时归还并关闭已空闲的淘汰句柄

        Example:
            >>> async with cache.lease(key) as client:
            ...     await client.query("SELECT * FROM users")
        """
        with self._lock:
            client = self._resolve_locked(key)
            self._in_use[key] = self._in_use.get(key, 0) + 1
        try:
            yield client
        finally:
            with self._lock:
                remaining = self._in_use[key] - 1
                if remaining:
                    self._in_use[key] = remaining
                else:
                    del self._in_use[key]
                idle = self._take_idle_evicted()
            await self._close(idle)

    def _resolve_locked(self, key: ClientKey) -> VaultBackendPort:
        client = self._clients.get(key)
        if client is not None:
            self._stats.hits += 1
            self._clients.move_to_end(key)
            return client

        client = self._evicted.pop(key, None)
        if client is not None:
            self._stats.hits += 1
            logger.info("Reusing evicted vault client: %s", key)
        else:
            self._stats.misses += 1
            logger.info("Initializing vault client: %s", key)
            client = self._factory(key, self._credentials)
            self._stats.constructions += 1
        self._clients[key] = client

        if self._max_size is not None and len(self._clients) > self._max_size:
            evicted_key, evicted = self._clients.popitem(last=False)
            self._evicted[evicted_key] = evicted
            self._stats.evictions += 1
            logger.info("Evicted vault client: %s", evicted_key)

        return client

    def _take_idle_evicted(self) -> list[VaultBackendPort]:
        idle_keys = [key for key in self._evicted if key not in self._in_use]
        return [self._evicted.pop(key) for key in idle_keys]

    async def _close(self, clients: list[VaultBackendPort]) -> None:
        for client in clients:
            await client.aclose()
        if clients:
            with self._lock:
                self._stats.closed += len(clients)

    def __contains__(self, key: ClientKey) -> bool:
        with self._lock:
            return key in self._clients

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._clients)

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._clients),
                "hits": self._stats.hits,
                "misses": self._stats.misses,
                "constructions": self._stats.constructions,
                "evictions": self._stats.evictions,
                "pending_close": len(self._evicted),
                "closed": self._stats.closed,
            }

    async def aclose(self) -> None:
        """关闭所有句柄（包括已淘汰但尚未关闭的），用于进程退出"""
        with self._lock:
            clients = list(self._clients.values()) + list(self._evicted.values())
            self._clients.clear()
            self._evicted.clear()
        await self._close(clients)
        logger.info("Vault client cache closed (%d clients)", len(clients))
