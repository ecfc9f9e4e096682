"""路由测试公共 fixture"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage


@pytest.fixture
def chat_model():
    """模拟聊天模型"""
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="Try SafeChoice Senior."))
    return model


@pytest.fixture
def client(kv, chat_model):
    """使用独立 KV 与模拟模型的测试客户端（不触发 lifespan）"""
    from app.core.dependencies import get_kv_store, get_llm
    from app.main import app

    app.dependency_overrides[get_kv_store] = lambda: kv
    app.dependency_overrides[get_llm] = lambda: chat_model
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
