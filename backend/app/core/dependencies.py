"""FastAPI 依赖注入

约定：
1. 路由层使用 Depends(get_kv_store) 获取 KV 存储
2. 服务层只依赖 KeyValueStore 抽象，不直接接触数据库会话
3. 脚本使用 get_kv_context()（无 request 上下文）
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends
from langchain_core.language_models import BaseChatModel

from app.core.config import settings
from app.core.database import get_db, get_db_context
from app.core.db.kv import DatabaseKVStore, KeyValueStore, get_memory_store
from app.core.llm import get_chat_model
from app.repositories.catalog import CatalogRepository
from app.services.advisor_chat import AdvisorChatService
from app.services.advisor_config import AdvisorConfigService
from app.services.catalog import CatalogService
from app.services.inquiry import InquiryService
from app.services.reviews import ReviewService
from app.services.site_content import PublicDataService, SiteContentService
from app.services.storage.blob_store import BlobStore


async def get_kv_store() -> AsyncGenerator[KeyValueStore, None]:
    """获取 KV 存储（用于 FastAPI 路由依赖注入）

    KV_BACKEND=memory 时返回进程内单例，否则每个请求一个数据库会话。
    """
    if settings.KV_BACKEND == "memory":
        yield get_memory_store()
        return
    async for session in get_db():
        yield DatabaseKVStore(session)


@asynccontextmanager
async def get_kv_context() -> AsyncGenerator[KeyValueStore, None]:
    """获取 KV 存储（上下文管理器，脚本使用）"""
    if settings.KV_BACKEND == "memory":
        yield get_memory_store()
        return
    async with get_db_context() as session:
        yield DatabaseKVStore(session)


# ========== 服务工厂 ==========


def get_catalog_service(kv: KeyValueStore = Depends(get_kv_store)) -> CatalogService:
    return CatalogService(CatalogRepository(kv), BlobStore(kv))


def get_advisor_config_service(
    kv: KeyValueStore = Depends(get_kv_store),
) -> AdvisorConfigService:
    return AdvisorConfigService(kv)


def get_llm() -> BaseChatModel:
    return get_chat_model()


def get_advisor_chat_service(
    config: AdvisorConfigService = Depends(get_advisor_config_service),
    model: BaseChatModel = Depends(get_llm),
) -> AdvisorChatService:
    return AdvisorChatService(config, model)


def get_inquiry_service(kv: KeyValueStore = Depends(get_kv_store)) -> InquiryService:
    return InquiryService(kv)


def get_review_service(kv: KeyValueStore = Depends(get_kv_store)) -> ReviewService:
    return ReviewService(kv)


def get_site_content_service(kv: KeyValueStore = Depends(get_kv_store)) -> SiteContentService:
    return SiteContentService(kv)


def get_public_data_service(kv: KeyValueStore = Depends(get_kv_store)) -> PublicDataService:
    return PublicDataService(kv)
