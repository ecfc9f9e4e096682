"""站点文案服务与前台公开数据读取

站点文案是固定字段表上的扁平字典，整体保存在 KV 的 site_content 键下。
前台只能读取白名单中的键：products / reviews / site_content / chatbot_rules。
"""

import json
from collections.abc import Mapping
from typing import Any

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.repositories.catalog import CatalogRepository
from app.schemas.site import SITE_CONTENT_FIELDS
from app.services.advisor_config import AdvisorConfigService
from app.services.reviews import ReviewService

logger = get_logger("services.site_content")

PUBLIC_KEYS = ("products", "reviews", "site_content", "chatbot_rules")


def clean_content(values: Mapping[str, Any]) -> dict[str, str]:
    """只保留已知字段，值统一转为字符串"""
    cleaned = {}
    for name in SITE_CONTENT_FIELDS:
        if name not in values:
            continue
        value = values[name]
        cleaned[name] = "" if value is None else str(value)
    return cleaned


class SiteContentService:
    """站点文案服务"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def get(self) -> dict[str, str]:
        raw = await self.kv.get(settings.SITE_CONTENT_KV_KEY)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("站点文案无法解析，按空文案处理", error=str(e))
            return {}
        return clean_content(data) if isinstance(data, dict) else {}

    async def save(self, values: Mapping[str, Any]) -> dict[str, str]:
        """整体替换站点文案"""
        content = clean_content(values)
        dropped = sorted(set(values) - set(content))
        if dropped:
            logger.warning("忽略未知的文案字段", fields=dropped)
        await self.kv.put(settings.SITE_CONTENT_KV_KEY, json.dumps(content, ensure_ascii=False))
        logger.info("站点文案已保存", fields=len(content))
        return content


class PublicDataService:
    """前台公开数据（白名单读取）"""

    def __init__(self, kv: KeyValueStore):
        self.catalog = CatalogRepository(kv)
        self.reviews = ReviewService(kv)
        self.content = SiteContentService(kv)
        self.advisor = AdvisorConfigService(kv)

    async def read(self, key: str) -> Any:
        if key == "products":
            products = await self.catalog.get_all()
            return [p.model_dump(mode="json", by_alias=True) for p in products]
        if key == "reviews":
            return [r.model_dump(mode="json") for r in await self.reviews.list_all()]
        if key == "site_content":
            return await self.content.get()
        if key == "chatbot_rules":
            return (await self.advisor.get_persona()).to_document()
        raise NotFoundError("Not found", data={"key": key, "allowed": list(PUBLIC_KEYS)})
