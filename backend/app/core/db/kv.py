"""KV 存储原语

目录、图片、顾问配置都只依赖这里的 get/put 两个操作：
- get(key) -> str | None
- put(key, value)

单个 key 的写入是原子的（DatabaseKVStore 每次 put 独立提交），
不提供跨 key 事务，也不提供版本号；并发写入后写覆盖先写。
"""

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BackingStoreUnavailableError
from app.core.logging import get_logger
from app.models.app_metadata import AppMetadata

logger = get_logger("db.kv")


class KeyValueStore(ABC):
    """KV 存储抽象基类"""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """读取 key，不存在返回 None"""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """整体写入 key（覆盖）"""


class DatabaseKVStore(KeyValueStore):
    """基于 app_metadata 表的 KV 存储"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> str | None:
        try:
            result = await self.session.execute(
                select(AppMetadata.value).where(AppMetadata.key == key)
            )
            return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error("KV 读取失败", key=key, error=str(e))
            raise BackingStoreUnavailableError(
                "Backing store could not be reached",
                data={"key": key, "operation": "get"},
            ) from e

    async def put(self, key: str, value: str) -> None:
        try:
            existing = await self.session.get(AppMetadata, key)
            if existing is None:
                self.session.add(AppMetadata(key=key, value=value))
            else:
                existing.value = value
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            await self.session.rollback()
            logger.error("KV 写入失败，已回滚", key=key, error=str(e))
            raise BackingStoreUnavailableError(
                "Backing store could not be reached",
                data={"key": key, "operation": "put"},
            ) from e
        logger.debug("KV 已写入", key=key, size=len(value))


class MemoryKVStore(KeyValueStore):
    """进程内 KV 存储（开发与测试使用）"""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        """当前所有 key（调试用）"""
        return list(self._data)


# ========== 单例管理 ==========
_memory_store: MemoryKVStore | None = None


def get_memory_store() -> MemoryKVStore:
    """获取进程内 KV 单例"""
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryKVStore()
    return _memory_store
