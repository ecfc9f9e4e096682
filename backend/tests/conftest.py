"""Pytest 配置"""

import os
import tempfile

import pytest


# 测试环境使用进程内 KV 与临时目录，不触发任何真实网络调用。
_TMP_DIR = tempfile.mkdtemp(prefix="feedstore-tests-")
os.environ.setdefault("KV_BACKEND", "memory")
os.environ.setdefault("DATABASE_PATH", os.path.join(_TMP_DIR, "app.db"))
os.environ.setdefault("LOG_FILE", os.path.join(_TMP_DIR, "app.log"))
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("LLM_PROVIDER", "test")
os.environ.setdefault("LLM_API_KEY", "test")
os.environ.setdefault("LLM_BASE_URL", "https://example.invalid")
os.environ.setdefault("LLM_CHAT_MODEL", "test-model")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def kv():
    """每个测试独立的进程内 KV"""
    from app.core.db.kv import MemoryKVStore

    return MemoryKVStore()


@pytest.fixture
def catalog_repo(kv):
    from app.repositories.catalog import CatalogRepository

    return CatalogRepository(kv)


@pytest.fixture
def blob_store(kv):
    from app.services.storage.blob_store import BlobStore

    return BlobStore(kv)
