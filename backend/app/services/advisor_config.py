"""顾问配置服务

人设（单例）与知识库（有序列表）都存放在 KV 中：
- chatbot_rules: 人设配置
- chatbot_kb: 知识条目列表

KV 中的值缺失或损坏时回落到默认值，不会让前台聊天不可用。
"""

import json
from typing import Any

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.prompts.assembler import build_system_prompt, resolve_knowledge, resolve_persona
from app.schemas.advisor import KnowledgeEntry, PersonaConfig

logger = get_logger("services.advisor_config")


class AdvisorConfigService:
    """顾问配置服务"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def _get_json(self, key: str) -> Any:
        raw = await self.kv.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("配置值无法解析，使用默认值", key=key, error=str(e))
            return None

    async def _put_json(self, key: str, value: Any) -> None:
        await self.kv.put(key, json.dumps(value, ensure_ascii=False))

    # ========== 人设 ==========

    async def get_persona(self) -> PersonaConfig:
        return resolve_persona(await self._get_json(settings.PERSONA_KV_KEY))

    async def save_persona(self, persona: PersonaConfig) -> PersonaConfig:
        await self._put_json(settings.PERSONA_KV_KEY, persona.to_document())
        logger.info("人设配置已保存", name=persona.name, tone=persona.tone)
        return persona

    # ========== 知识库 ==========

    async def list_knowledge(self) -> list[KnowledgeEntry]:
        return resolve_knowledge(await self._get_json(settings.KNOWLEDGE_KV_KEY))

    async def replace_knowledge(self, entries: list[KnowledgeEntry]) -> list[KnowledgeEntry]:
        await self._put_json(
            settings.KNOWLEDGE_KV_KEY, [e.model_dump(mode="json") for e in entries]
        )
        logger.info("知识库已替换", count=len(entries))
        return entries

    async def add_knowledge(self, entry: KnowledgeEntry) -> list[KnowledgeEntry]:
        entries = await self.list_knowledge()
        entries.append(entry)
        return await self.replace_knowledge(entries)

    async def update_knowledge(self, index: int, entry: KnowledgeEntry) -> list[KnowledgeEntry]:
        entries = await self.list_knowledge()
        self._check_index(index, entries)
        entries[index] = entry
        return await self.replace_knowledge(entries)

    async def delete_knowledge(self, index: int) -> KnowledgeEntry:
        entries = await self.list_knowledge()
        self._check_index(index, entries)
        removed = entries.pop(index)
        await self.replace_knowledge(entries)
        return removed

    @staticmethod
    def _check_index(index: int, entries: list[KnowledgeEntry]) -> None:
        if not 0 <= index < len(entries):
            raise NotFoundError(
                f"Knowledge entry {index} not found",
                data={"index": index, "count": len(entries)},
            )

    # ========== 提示词 ==========

    async def build_prompt(self) -> tuple[str, int]:
        """用已保存的配置组装系统提示词，返回 (提示词, 知识条目数)"""
        persona = await self.get_persona()
        knowledge = await self.list_knowledge()
        return build_system_prompt(persona, knowledge), len(knowledge)
