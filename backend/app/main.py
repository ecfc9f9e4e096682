"""FastAPI 应用入口"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import init_db
from app.core.db.provider import close_database_provider
from app.core.errors import AppError, DomainError, InvalidInputError, create_error_response
from app.core.logging import logger
from app.routers import advisor, catalog, health, public, site


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    # 启动时配置日志（确保最先执行）
    logger.configure()

    logger.info("启动应用...", module="app")
    if settings.KV_BACKEND == "database":
        await init_db()
    else:
        logger.warning("使用进程内 KV 存储，重启后数据丢失", module="app")

    logger.info(
        "应用启动完成",
        module="app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        kv_backend=settings.KV_BACKEND,
    )

    yield

    logger.info("正在关闭应用...", module="app")

    if settings.KV_BACKEND == "database":
        await close_database_provider()

    from app.core.llm import get_chat_model

    get_chat_model.cache_clear()
    logger.info("应用已关闭", module="app")


app = FastAPI(
    title="British Feed 商品目录与顾问",
    description="商品目录、CSV 导入导出、图片存储、饲料推荐与聊天顾问",
    version=health.APP_VERSION,
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========== 异常处理 ==========


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """领域异常 -> 标准错误响应"""
    if exc.status_code >= 500:
        logger.error(
            "请求失败",
            module="app",
            path=request.url.path,
            code=exc.code,
            error=exc.message,
        )
    else:
        logger.info("请求被拒绝", module="app", path=request.url.path, code=exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.code, exc.message, exc.data),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.code, exc.error_message, exc.data),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体校验失败按 InvalidInput 返回"""
    errors = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg")}
        for err in exc.errors()
    ]
    message = "; ".join(f"{'.'.join(e['loc'])}: {e['msg']}" for e in errors) or "Invalid input"
    return JSONResponse(
        status_code=InvalidInputError.status_code,
        content=create_error_response(InvalidInputError.code, message, {"errors": errors}),
    )


# 注册路由
app.include_router(health.router)
app.include_router(catalog.router)
app.include_router(advisor.router)
app.include_router(site.router)
app.include_router(public.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
    )
