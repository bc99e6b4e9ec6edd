from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from typing import Dict, Any
from ..logging_config import get_logger
from ...domain.exception.user_exceptions import (
    ErrorKind,
    StorageFailureError,
    UserException,
)

logger = get_logger("api.errors")

INTERNAL_ERROR_MESSAGE = "internal server error, something went wrong"

# USER_IS_GONE は DELETE の場合のみ 409 に差し替える
STATUS_CODE_MAP = {
    ErrorKind.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_GENDER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_AGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.USERNAME_ALREADY_TAKEN: status.HTTP_409_CONFLICT,
    ErrorKind.USER_DOES_NOT_EXIST: status.HTTP_404_NOT_FOUND,
    ErrorKind.USER_IS_GONE: status.HTTP_410_GONE,
    ErrorKind.USER_HAS_BEEN_DELETED_ONCE: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class UserFriendlyError(Exception):
    """ユーザーフレンドリーなエラーメッセージを持つ例外（リクエスト読み取り段階のエラー）"""
    def __init__(self,
                 message: str,
                 user_message: str,
                 status_code: int = 500,
                 error_type: str = "internal_error",
                 retry_available: bool = False):
        super().__init__(message)
        self.user_message = user_message
        self.status_code = status_code
        self.error_type = error_type
        self.retry_available = retry_available


def create_error_response(
    error_type: str,
    user_message: str,
    detail: Any = None,
    status_code: int = 500,
    retry_available: bool = False,
    additional_data: Dict[str, Any] = None
) -> JSONResponse:
    """統一されたエラーレスポンスを作成"""
    content = {
        "error_type": error_type,
        "user_message": user_message,
        "retry_available": retry_available
    }

    if detail:
        content["detail"] = detail

    if additional_data:
        content.update(additional_data)

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def status_code_for(exc: UserException, method: str) -> int:
    if exc.kind == ErrorKind.USER_IS_GONE and method == "DELETE":
        return status.HTTP_409_CONFLICT
    if isinstance(exc, StorageFailureError) and exc.is_timeout:
        return status.HTTP_504_GATEWAY_TIMEOUT
    return STATUS_CODE_MAP.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_user_exception(request: Request, exc: UserException):
    """ユーザードメイン例外のハンドリング"""
    status_code = status_code_for(exc, request.method)
    is_storage_failure = isinstance(exc, StorageFailureError)
    log = logger.error if is_storage_failure else logger.warning
    log(
        f"User exception: {exc.__class__.__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_code": exc.error_code,
            "error": str(exc),
            "cause": repr(exc.__cause__) if exc.__cause__ else None,
        }
    )

    return create_error_response(
        error_type=exc.error_code,
        user_message=INTERNAL_ERROR_MESSAGE if is_storage_failure else exc.message,
        status_code=status_code,
        # 再試行可能なのは冪等な読み取りのストレージ障害のみ
        retry_available=is_storage_failure and request.method == "GET"
    )


async def handle_user_friendly_error(request: Request, exc: UserFriendlyError):
    """リクエスト読み取り段階のエラーのハンドリング"""
    logger.warning(
        "Request rejected",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc)
        }
    )

    return create_error_response(
        error_type=exc.error_type,
        user_message=exc.user_message,
        status_code=exc.status_code,
        retry_available=exc.retry_available
    )


async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """FastAPIバリデーションエラーのハンドリング"""
    logger.warning(
        "FastAPI validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors()
        }
    )

    return create_error_response(
        error_type="validation_error",
        user_message="Invalid request",
        detail=jsonable_encoder(exc.errors()),
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        retry_available=False
    )


async def handle_generic_error(request: Request, exc: Exception):
    """その他のエラーのハンドリング"""
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
            "error_type": type(exc).__name__
        },
        exc_info=True
    )

    return create_error_response(
        error_type="internal_error",
        user_message=INTERNAL_ERROR_MESSAGE,
        detail=str(exc) if request.app.debug else None,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        retry_available=False
    )
