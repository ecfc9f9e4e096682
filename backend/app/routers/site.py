"""站点内容管理 API

客户评价与站点文案。
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from app.core.dependencies import get_review_service, get_site_content_service
from app.schemas.site import Review
from app.services.reviews import ReviewService
from app.services.site_content import SiteContentService

router = APIRouter(prefix="/admin/api/site", tags=["site"])


# ========== 评价 ==========


@router.get("/reviews", response_model=list[Review])
async def list_reviews(service: ReviewService = Depends(get_review_service)) -> list[Review]:
    return await service.list_all()


@router.put("/reviews", response_model=list[Review])
async def replace_reviews(
    reviews: list[Review],
    service: ReviewService = Depends(get_review_service),
) -> list[Review]:
    return await service.replace_all(reviews)


@router.post("/reviews", response_model=list[Review])
async def add_review(
    review: Review,
    service: ReviewService = Depends(get_review_service),
) -> list[Review]:
    return await service.add(review)


@router.put("/reviews/{index}", response_model=list[Review])
async def update_review(
    index: int,
    review: Review,
    service: ReviewService = Depends(get_review_service),
) -> list[Review]:
    return await service.update(index, review)


@router.delete("/reviews/{index}", response_model=Review)
async def delete_review(
    index: int,
    service: ReviewService = Depends(get_review_service),
) -> Review:
    return await service.delete(index)


# ========== 站点文案 ==========


@router.get("/content")
async def get_content(
    service: SiteContentService = Depends(get_site_content_service),
) -> dict[str, str]:
    return await service.get()


@router.put("/content")
async def save_content(
    values: dict[str, Any] = Body(...),
    service: SiteContentService = Depends(get_site_content_service),
) -> dict[str, str]:
    """整体保存站点文案（未知字段被忽略）"""
    return await service.save(values)
