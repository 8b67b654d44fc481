"""客户端查询缓存"""
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

from cachetools import TTLCache

from ..config import settings


def key_family(key: Hashable) -> Hashable:
    """缓存键的资源族：元组取第一个元素"""
    return key[0] if isinstance(key, tuple) and key else key


class QueryCache:
    """
    按资源键缓存服务端响应

    Usage:
        cache = QueryCache(stale_time=300)
        links = await cache.fetch(("links", "", None, None, False), fetch_links)
        cache.invalidate("links")

    - 条目在 stale_time 秒内视为新鲜，直接返回；过期后下一次读取重新请求
    - invalidate 按资源族清除条目
    - 请求期间如果发生失效或同一键上有更新的请求，旧请求的结果不写入缓存
    """

    def __init__(
        self,
        stale_time: float = settings.CACHE_STALE_TIME,
        maxsize: int = settings.CACHE_MAX_SIZE,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = stale_time
        self._cache = TTLCache(maxsize=maxsize, ttl=stale_time, timer=timer)
        self._pending: Dict[Hashable, object] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, key: Hashable) -> Optional[Any]:
        """读取新鲜条目，缺失或已过期返回 None"""
        return self._cache.get(key)

    def set(self, key: Hashable, value: Any) -> None:
        self._cache[key] = value

    async def fetch(self, key: Hashable, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """命中新鲜缓存直接返回，否则调用 fetcher 并写入缓存"""
        if key in self._cache:
            return self._cache[key]

        token = object()
        self._pending[key] = token
        owner = False
        try:
            data = await fetcher()
        finally:
            # 只有最新且未被失效的请求才能写缓存
            owner = self._pending.get(key) is token
            if owner:
                del self._pending[key]

        if owner:
            self._cache[key] = data
        return data

    def invalidate(self, *families: Hashable) -> int:
        """
        清除指定资源族的全部条目，返回清除数量

        不传参数时清空全部缓存
        """
        matched = [
            key for key in list(self._cache.keys())
            if not families or key_family(key) in families
        ]
        for key in matched:
            self._cache.pop(key, None)

        # 正在进行的请求结果作废
        for key in [k for k in self._pending if not families or key_family(k) in families]:
            del self._pending[key]
        return len(matched)

    def clear(self) -> None:
        self.invalidate()
