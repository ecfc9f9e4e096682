"""错误处理模块测试"""

import pytest
from fastapi import status

from app.core.errors import (
    AppError,
    BackingStoreUnavailableError,
    DomainError,
    InvalidInputError,
    NotFoundError,
    TooLargeError,
    create_error_response,
    raise_bad_request,
)


class TestAppError:
    """测试 AppError 自定义异常"""

    def test_basic_error(self):
        """测试基本错误创建"""
        error = AppError(code="test_error", message="Something failed")
        assert error.code == "test_error"
        assert error.error_message == "Something failed"
        assert error.status_code == status.HTTP_400_BAD_REQUEST
        assert error.data is None

    def test_error_with_custom_status(self):
        """测试自定义状态码"""
        error = AppError(
            code="not_found",
            message="Missing",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        assert error.status_code == status.HTTP_404_NOT_FOUND


class TestDomainErrors:
    """测试领域异常"""

    @pytest.mark.parametrize(
        ("error_cls", "code", "status_code"),
        [
            (NotFoundError, "not_found", 404),
            (InvalidInputError, "invalid_input", 400),
            (TooLargeError, "too_large", 413),
            (BackingStoreUnavailableError, "backing_store_unavailable", 503),
        ],
    )
    def test_codes_and_status(self, error_cls, code, status_code):
        """测试每种领域异常的错误码与状态码"""
        error = error_cls("boom")
        assert isinstance(error, DomainError)
        assert error.code == code
        assert error.status_code == status_code
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_custom_code_and_data(self):
        """测试覆盖错误码并携带数据"""
        error = InvalidInputError("bad row", code="csv_invalid", data={"row": 3})
        assert error.code == "csv_invalid"
        assert error.data == {"row": 3}
        # 类属性不受实例覆盖影响
        assert InvalidInputError.code == "invalid_input"


class TestCreateErrorResponse:
    """测试错误响应创建函数"""

    def test_basic_response(self):
        """测试基本响应结构"""
        response = create_error_response(code="test_code", message="Test message")
        assert response["error"]["code"] == "test_code"
        assert response["error"]["message"] == "Test message"
        assert response["error"]["data"] is None
        assert "timestamp" in response["error"]

    def test_timestamp_format(self):
        """测试时间戳格式"""
        timestamp = create_error_response(code="test", message="test")["error"]["timestamp"]
        assert timestamp.endswith("Z")
        assert "T" in timestamp


class TestRaiseHelpers:
    """测试快捷函数"""

    def test_raise_bad_request(self):
        """测试 400 错误"""
        with pytest.raises(AppError) as exc_info:
            raise_bad_request(code="invalid_encoding", message="Bad encoding", data={"field": "file"})

        error = exc_info.value
        assert error.status_code == status.HTTP_400_BAD_REQUEST
        assert error.data == {"field": "file"}
