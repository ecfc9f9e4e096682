"""客户评价服务

评价列表以 JSON 数组存放在 KV 的 reviews 键下，按下标编辑。
"""

import json

from pydantic import ValidationError

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.schemas.site import Review

logger = get_logger("services.reviews")


class ReviewService:
    """客户评价服务"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def list_all(self) -> list[Review]:
        """全部评价（按保存顺序），无效条目跳过"""
        raw = await self.kv.get(settings.REVIEWS_KV_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("评价列表无法解析，按空列表处理", error=str(e))
            return []
        if not isinstance(data, list):
            return []

        reviews = []
        for item in data:
            try:
                reviews.append(Review.model_validate(item))
            except ValidationError:
                logger.debug("跳过无效评价", item_type=type(item).__name__)
        return reviews

    async def replace_all(self, reviews: list[Review]) -> list[Review]:
        await self.kv.put(
            settings.REVIEWS_KV_KEY,
            json.dumps([r.model_dump(mode="json") for r in reviews], ensure_ascii=False),
        )
        logger.info("评价列表已保存", count=len(reviews))
        return reviews

    async def add(self, review: Review) -> list[Review]:
        reviews = await self.list_all()
        reviews.append(review)
        return await self.replace_all(reviews)

    async def update(self, index: int, review: Review) -> list[Review]:
        reviews = await self.list_all()
        self._check_index(index, reviews)
        reviews[index] = review
        return await self.replace_all(reviews)

    async def delete(self, index: int) -> Review:
        reviews = await self.list_all()
        self._check_index(index, reviews)
        removed = reviews.pop(index)
        await self.replace_all(reviews)
        return removed

    @staticmethod
    def _check_index(index: int, reviews: list[Review]) -> None:
        if not 0 <= index < len(reviews):
            raise NotFoundError(
                f"Review {index} not found",
                data={"index": index, "count": len(reviews)},
            )
