"""顾问系统提示词组装

build_system_prompt(persona, knowledge) 是纯函数，输出顺序固定：
身份 -> 门店信息 -> 语气 -> 回复长度 -> 禁谈话题 -> 自定义指令 -> 知识库 -> 结束语。

人设和知识条目可以是模型、字典或任意脏数据；
无法识别的部分回落到默认值或被跳过，函数本身从不抛异常。
知识条目的 priority 只是展示标记，不改变拼接顺序。
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from app.core.config import settings
from app.prompts.defaults import (
    DEFAULT_LENGTH,
    DEFAULT_PROMPTS,
    DEFAULT_TONE,
    LENGTH_INSTRUCTIONS,
    TONE_PHRASES,
)
from app.schemas.advisor import KnowledgeEntry, PersonaConfig

logger = structlog.get_logger(__name__)


def _template(key: str) -> str:
    return DEFAULT_PROMPTS[key]["content"]


def resolve_persona(persona: Any) -> PersonaConfig:
    """把任意输入解析为人设配置"""
    if isinstance(persona, PersonaConfig):
        return persona
    if isinstance(persona, Mapping):
        try:
            return PersonaConfig.model_validate(dict(persona))
        except ValidationError as e:
            logger.warning("人设配置无法解析，使用默认值", error=str(e))
    elif persona is not None:
        logger.warning("人设配置类型异常，使用默认值", type=type(persona).__name__)
    return PersonaConfig()


def resolve_knowledge(knowledge: Any) -> list[KnowledgeEntry]:
    """把任意输入解析为知识条目列表，无效条目跳过"""
    if isinstance(knowledge, (str, bytes, Mapping)) or not isinstance(knowledge, Iterable):
        return []
    entries: list[KnowledgeEntry] = []
    for item in knowledge:
        if isinstance(item, KnowledgeEntry):
            entries.append(item)
            continue
        if not isinstance(item, Mapping):
            continue
        try:
            entries.append(KnowledgeEntry.model_validate(dict(item)))
        except ValidationError:
            logger.debug("跳过无效知识条目", keys=sorted(str(k) for k in item))
    return entries


def tone_phrase(tone: Any) -> str:
    """语气 -> 短语，未知值回落到 friendly"""
    key = tone.strip().lower() if isinstance(tone, str) else ""
    return TONE_PHRASES.get(key, TONE_PHRASES[DEFAULT_TONE])


def length_instruction(length: Any) -> str:
    """回复长度 -> 说明，未知值回落到 medium"""
    key = length.strip().lower() if isinstance(length, str) else ""
    return LENGTH_INSTRUCTIONS.get(key, LENGTH_INSTRUCTIONS[DEFAULT_LENGTH])


def render_knowledge(entries: list[KnowledgeEntry]) -> str:
    """渲染知识库段落，无条目时返回空串"""
    if not entries:
        return ""
    pairs = "\n\n".join(
        _template("advisor.knowledge_entry").format(question=e.question, answer=e.answer)
        for e in entries
    )
    return _template("advisor.knowledge").format(entries=pairs)


def build_system_prompt(persona: Any = None, knowledge: Any = None) -> str:
    """组装顾问系统提示词"""
    config = resolve_persona(persona)
    entries = resolve_knowledge(knowledge)

    lines = [
        _template("advisor.identity").format(
            name=config.name.strip() or settings.DEFAULT_PERSONA_NAME,
            store_name=settings.STORE_NAME,
            store_area=settings.STORE_AREA,
        ),
        _template("advisor.store_facts").format(
            store_address=settings.STORE_ADDRESS,
            store_phone=settings.STORE_PHONE,
            store_delivery=settings.STORE_DELIVERY_NOTE,
            store_services=settings.STORE_SERVICES,
        ),
        _template("advisor.tone").format(tone_phrase=tone_phrase(config.tone)),
        _template("advisor.length").format(
            length_instruction=length_instruction(config.response_length)
        ),
    ]
    if config.must_avoid_topics.strip():
        lines.append(_template("advisor.avoid").format(topics=config.must_avoid_topics.strip()))
    if config.custom_instructions.strip():
        lines.append(config.custom_instructions)

    knowledge_section = render_knowledge(entries)
    if knowledge_section:
        lines.append("")
        lines.append(knowledge_section)
        lines.append("")

    lines.append(
        _template("advisor.closing").format(
            cta=config.closing_call_to_action.strip() or settings.DEFAULT_CLOSING_CTA
        )
    )
    return "\n".join(lines)


def fallback_reply() -> str:
    """模型不可用时的固定回复"""
    return _template("advisor.fallback_reply").format(store_phone=settings.STORE_PHONE)
