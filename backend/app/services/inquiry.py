"""留言服务

联系表单提交追加到 KV 中的 contacts 列表，提交时打上日期（如 "October 19, 2026"）。
"""

import json
from datetime import date

from pydantic import ValidationError

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.logging import get_logger
from app.schemas.advisor import ContactInquiry

logger = get_logger("services.inquiry")


def format_submission_date(day: date) -> str:
    return f"{day.strftime('%B')} {day.day}, {day.year}"


class InquiryService:
    """留言服务"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def _load(self) -> list[dict]:
        raw = await self.kv.get(settings.INQUIRY_KV_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("留言列表无法解析，按空列表处理", error=str(e))
            return []
        return [item for item in data if isinstance(item, dict)] if isinstance(data, list) else []

    async def list_all(self) -> list[ContactInquiry]:
        """全部留言，最新的在最后"""
        inquiries = []
        for item in await self._load():
            try:
                inquiries.append(ContactInquiry.model_validate(item))
            except ValidationError:
                logger.debug("跳过无效留言", keys=sorted(item))
        return inquiries

    async def submit(self, inquiry: ContactInquiry, *, today: date | None = None) -> ContactInquiry:
        stamped = inquiry.model_copy(update={"date": format_submission_date(today or date.today())})
        items = await self._load()
        items.append(stamped.to_document())
        await self.kv.put(settings.INQUIRY_KV_KEY, json.dumps(items, ensure_ascii=False))
        logger.info("收到新留言", name=stamped.name, topic=stamped.topic or None)
        return stamped
