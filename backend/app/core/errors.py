"""统一错误处理

提供标准化的错误响应结构、路由层异常（AppError）以及领域异常。

领域异常由服务层抛出，不依赖 HTTP：
- NotFoundError: 引用的 id / key 不存在
- InvalidInputError: 缺少必填字段、CSV 表头错误、负价格等
- TooLargeError: 图片超过大小上限
- BackingStoreUnavailableError: 底层 KV 存储不可用（未发生部分写入）

main.py 中注册的处理器会把领域异常渲染为标准错误响应。
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel


class ErrorPayload(BaseModel):
    """标准错误响应结构"""

    code: str
    message: str
    data: dict[str, Any] | None = None
    timestamp: str


class AppError(HTTPException):
    """应用自定义异常

    使用示例:
        raise AppError(
            code="invalid_upload",
            message="No file provided",
            status_code=400,
        )
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        data: dict[str, Any] | None = None,
    ):
        self.code = code
        self.error_message = message
        self.data = data
        super().__init__(status_code=status_code, detail=message)


class DomainError(Exception):
    """领域异常基类"""

    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.data = data


class NotFoundError(DomainError):
    """资源不存在"""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidInputError(DomainError):
    """输入不合法"""

    code = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class TooLargeError(DomainError):
    """负载超过上限"""

    code = "too_large"
    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class BackingStoreUnavailableError(DomainError):
    """底层存储不可用"""

    code = "backing_store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def create_error_response(
    code: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """创建标准错误响应"""
    return {
        "error": {
            "code": code,
            "message": message,
            "data": data,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z",
        }
    }


# 常用错误快捷函数
def raise_bad_request(code: str, message: str, data: dict[str, Any] | None = None) -> None:
    """抛出请求参数错误"""
    raise AppError(
        code=code,
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        data=data,
    )
