"""前台公开 API

商品展示、站点数据、饲料推荐、聊天助手与联系表单。
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from app.core.dependencies import (
    get_advisor_chat_service,
    get_catalog_service,
    get_inquiry_service,
    get_public_data_service,
)
from app.schemas.advisor import ChatReply, ChatRequest, ContactInquiry, ContactReceipt
from app.schemas.product import Product
from app.schemas.recommendation import RecommendationResult
from app.schemas.site import PublicData
from app.services.advisor_chat import AdvisorChatService
from app.services.catalog import CatalogService
from app.services.inquiry import InquiryService
from app.services.recommendation import evaluate
from app.services.site_content import PublicDataService

router = APIRouter(prefix="/api", tags=["public"])


@router.get("/public/catalog", response_model=list[Product])
async def public_catalog(service: CatalogService = Depends(get_catalog_service)) -> list[Product]:
    """前台商品列表"""
    return await service.list_products()


@router.get("/public/{key}", response_model=PublicData)
async def public_data(
    key: str,
    service: PublicDataService = Depends(get_public_data_service),
) -> PublicData:
    """前台读取白名单中的数据（商品、评价、站点文案、顾问人设）"""
    return PublicData(data=await service.read(key))


@router.post("/recommendations", response_model=RecommendationResult)
async def recommendations(profile: Any = Body(None)) -> RecommendationResult:
    """饲料推荐

    请求体可以是 {type, activityLevel, healthConcerns}，
    也兼容前台选择器的 {horseType, activity, health}；无法识别的值会被忽略。
    """
    return evaluate(profile)


@router.post("/chat", response_model=ChatReply)
async def chat(
    body: ChatRequest,
    service: AdvisorChatService = Depends(get_advisor_chat_service),
) -> ChatReply:
    """聊天助手"""
    return await service.reply(body.messages)


@router.post("/contact", response_model=ContactReceipt)
async def contact(
    inquiry: ContactInquiry,
    service: InquiryService = Depends(get_inquiry_service),
) -> ContactReceipt:
    """提交联系表单"""
    await service.submit(inquiry)
    return ContactReceipt()
