"""健康检查 API"""

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.dependencies import get_kv_store
from app.core.errors import BackingStoreUnavailableError
from app.core.llm import is_chat_model_configured
from app.core.logging import get_logger

router = APIRouter(prefix="/health", tags=["health"])
logger = get_logger("api.health")

APP_VERSION = "0.1.0"


@router.get("")
async def health_check(kv: KeyValueStore = Depends(get_kv_store)):
    """基础健康检查（含 KV 存储探测）

    未配置 LLM 凭证时聊天接口只会返回兜底回复，这里一并标出。
    """
    llm = "configured" if is_chat_model_configured() else "not_configured"
    try:
        await kv.get(settings.CATALOG_KV_KEY)
    except BackingStoreUnavailableError as e:
        logger.warning("健康检查：KV 存储不可用", error=e.message)
        return {"status": "degraded", "version": APP_VERSION, "kv": "unavailable", "llm": llm}
    return {"status": "ok", "version": APP_VERSION, "kv": settings.KV_BACKEND, "llm": llm}
