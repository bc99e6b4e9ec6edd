"""
FastAPI依存性注入の定義

DIコンテナ（app.state.container）から適切なサービスインスタンスを取得し、
リクエストの前処理（パスパラメータ、Content-Type、ボディ読み取り）を
ライフサイクルサービス呼び出し前に行います。
"""

import re

from fastapi import Depends, Request, status
from pydantic import ValidationError
from starlette.requests import ClientDisconnect
from typing import Annotated

from ..config import Settings
from ..di import DIContainer
from ...usecase.user_management.lifecycle_service import UserLifecycleService
from .error_handlers import UserFriendlyError
from .schemas import UserPayload

CONTENT_TYPE_JSON = "application/json"

USER_ID_PATTERN = re.compile(r"[+-]?[0-9]{1,19}")
MIN_USER_ID = -(1 << 63)
MAX_USER_ID = (1 << 63) - 1


def get_container(request: Request) -> DIContainer:
    return request.app.state.container


def get_settings(container: Annotated[DIContainer, Depends(get_container)]) -> Settings:
    return container.settings


def get_lifecycle_service(
    container: Annotated[DIContainer, Depends(get_container)]
) -> UserLifecycleService:
    """
    ライフサイクルサービスの依存性を取得

    Returns:
        UserLifecycleService: DIコンテナのシングルトンインスタンス
    """
    return container.lifecycle_service


def parse_user_id(user_id: str) -> int:
    """パスパラメータのIDを符号付き64ビット整数として解釈する"""
    if USER_ID_PATTERN.fullmatch(user_id):
        value = int(user_id)
        if MIN_USER_ID <= value <= MAX_USER_ID:
            return value
    raise UserFriendlyError(
        f"invalid type of user_id: {user_id}",
        user_message="Invalid type of user_id",
        status_code=status.HTTP_400_BAD_REQUEST,
        error_type="invalid_user_id",
    )


async def read_user_payload(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)]
) -> UserPayload:
    """
    リクエストボディをユーザーペイロードとして読み取る

    Content-Type の確認、サイズ上限の確認、JSONのパースを行います。
    """
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != CONTENT_TYPE_JSON:
        raise UserFriendlyError(
            "invalid content type",
            user_message="Invalid type of content",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="invalid_content_type",
        )

    too_large = UserFriendlyError(
        "request body too large",
        user_message="Request body too large",
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        error_type="body_too_large",
    )
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > settings.max_body_bytes:
        raise too_large

    try:
        body = await request.body()
    except ClientDisconnect as e:
        raise UserFriendlyError(
            f"failed to read request body: {e}",
            user_message="Error in reading request body",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="body_read_error",
        ) from e

    if len(body) > settings.max_body_bytes:
        raise too_large

    try:
        return UserPayload.model_validate_json(body)
    except ValidationError as e:
        raise UserFriendlyError(
            f"failed to unmarshal request body: {e}",
            user_message="Error in parsing request body",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="body_parse_error",
        ) from e
