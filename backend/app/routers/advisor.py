"""顾问配置管理 API

人设、知识库、提示词预览、试聊与留言查看。
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import (
    get_advisor_chat_service,
    get_advisor_config_service,
    get_inquiry_service,
)
from app.schemas.advisor import (
    ChatPreviewRequest,
    ChatReply,
    ContactInquiry,
    KnowledgeEntry,
    PersonaConfig,
    PromptPreview,
)
from app.services.advisor_chat import AdvisorChatService
from app.services.advisor_config import AdvisorConfigService
from app.services.inquiry import InquiryService

router = APIRouter(prefix="/admin/api/advisor", tags=["advisor"])


# ========== 人设 ==========


@router.get("/persona", response_model=PersonaConfig)
async def get_persona(
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> PersonaConfig:
    return await service.get_persona()


@router.put("/persona", response_model=PersonaConfig)
async def save_persona(
    persona: PersonaConfig,
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> PersonaConfig:
    return await service.save_persona(persona)


# ========== 知识库 ==========


@router.get("/knowledge", response_model=list[KnowledgeEntry])
async def list_knowledge(
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> list[KnowledgeEntry]:
    return await service.list_knowledge()


@router.put("/knowledge", response_model=list[KnowledgeEntry])
async def replace_knowledge(
    entries: list[KnowledgeEntry],
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> list[KnowledgeEntry]:
    return await service.replace_knowledge(entries)


@router.post("/knowledge", response_model=list[KnowledgeEntry])
async def add_knowledge(
    entry: KnowledgeEntry,
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> list[KnowledgeEntry]:
    return await service.add_knowledge(entry)


@router.put("/knowledge/{index}", response_model=list[KnowledgeEntry])
async def update_knowledge(
    index: int,
    entry: KnowledgeEntry,
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> list[KnowledgeEntry]:
    return await service.update_knowledge(index, entry)


@router.delete("/knowledge/{index}", response_model=KnowledgeEntry)
async def delete_knowledge(
    index: int,
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> KnowledgeEntry:
    return await service.delete_knowledge(index)


# ========== 提示词与试聊 ==========


@router.get("/prompt", response_model=PromptPreview)
async def preview_prompt(
    service: AdvisorConfigService = Depends(get_advisor_config_service),
) -> PromptPreview:
    """预览用已保存配置组装出的系统提示词"""
    prompt, count = await service.build_prompt()
    return PromptPreview(prompt=prompt, knowledge_count=count)


@router.post("/test-chat", response_model=ChatReply)
async def test_chat(
    body: ChatPreviewRequest,
    service: AdvisorChatService = Depends(get_advisor_chat_service),
) -> ChatReply:
    """用编辑器草稿配置试聊"""
    return await service.preview(body.message, body.persona, body.knowledge)


# ========== 留言 ==========


@router.get("/inquiries", response_model=list[ContactInquiry])
async def list_inquiries(
    service: InquiryService = Depends(get_inquiry_service),
) -> list[ContactInquiry]:
    return await service.list_all()
