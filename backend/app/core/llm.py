"""LLM 初始化模块"""

from functools import lru_cache

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger("llm")


@lru_cache
def get_chat_model() -> BaseChatModel:
    """获取聊天模型

    支持所有兼容 OpenAI API 格式的提供商（OpenAI、DeepSeek、SiliconFlow 等），
    由 LLM_BASE_URL 决定实际请求地址。
    """
    logger.info(
        "初始化聊天模型",
        provider=settings.LLM_PROVIDER,
        model=settings.LLM_CHAT_MODEL,
        max_tokens=settings.LLM_MAX_TOKENS,
    )
    return ChatOpenAI(
        model=settings.LLM_CHAT_MODEL,
        base_url=settings.LLM_BASE_URL,
        api_key=settings.LLM_API_KEY or "not-configured",
        max_tokens=settings.LLM_MAX_TOKENS,
        temperature=settings.LLM_TEMPERATURE,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_retries=1,
    )


def is_chat_model_configured() -> bool:
    """是否配置了 LLM 凭证"""
    return bool(settings.LLM_API_KEY)
