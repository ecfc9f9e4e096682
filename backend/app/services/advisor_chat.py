"""顾问聊天服务

把组装好的系统提示词与对话轮次一起发送给聊天模型：

    [system, *turns]

只转发 user / assistant 轮次，调用方传入的 system 轮次会被丢弃。
模型返回空内容或调用失败时返回固定的兜底回复（degraded=True）。
"""

from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from app.core.logging import get_logger
from app.prompts.assembler import build_system_prompt, fallback_reply
from app.schemas.advisor import ChatReply, ChatTurn
from app.services.advisor_config import AdvisorConfigService

logger = get_logger("services.advisor_chat")


def _message_text(message: Any) -> str:
    """提取模型回复的文本内容"""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts).strip()
    return ""


def to_messages(system_prompt: str, turns: list[ChatTurn]) -> list[BaseMessage]:
    """构造发送给模型的消息列表"""
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for turn in turns:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        elif turn.role == "assistant":
            messages.append(AIMessage(content=turn.content))
    return messages


class AdvisorChatService:
    """顾问聊天服务"""

    def __init__(self, config: AdvisorConfigService, model: BaseChatModel):
        self.config = config
        self.model = model

    async def reply(self, turns: list[ChatTurn]) -> ChatReply:
        """使用已保存的人设与知识库回复"""
        persona = await self.config.get_persona()
        knowledge = await self.config.list_knowledge()
        return await self._complete(build_system_prompt(persona, knowledge), turns)

    async def preview(self, message: str, persona: Any = None, knowledge: Any = None) -> ChatReply:
        """使用编辑器中未保存的草稿配置试聊

        persona / knowledge 为空时使用已保存的配置。
        """
        if persona is None:
            persona = await self.config.get_persona()
        if knowledge is None:
            knowledge = await self.config.list_knowledge()
        prompt = build_system_prompt(persona, knowledge)
        return await self._complete(prompt, [ChatTurn(role="user", content=message)])

    async def _complete(self, system_prompt: str, turns: list[ChatTurn]) -> ChatReply:
        messages = to_messages(system_prompt, turns)
        try:
            response = await self.model.ainvoke(messages)
        except Exception as e:  # noqa: BLE001
            logger.error("聊天模型调用失败", error=str(e), error_type=type(e).__name__)
            return ChatReply(reply=fallback_reply(), degraded=True)

        text = _message_text(response)
        if not text:
            logger.warning("聊天模型返回空内容", turns=len(messages) - 1)
            return ChatReply(reply=fallback_reply(), degraded=True)
        return ChatReply(reply=text)
