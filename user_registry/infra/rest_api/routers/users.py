from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from typing import Annotated

from ..dependencies import get_lifecycle_service, parse_user_id, read_user_payload
from ..schemas import MessageResponse, UserPayload, UserResponse
from ....usecase.user_management.lifecycle_service import UserLifecycleService

router = APIRouter(
    prefix="/users",
    tags=["users"]
)

ServiceDep = Annotated[UserLifecycleService, Depends(get_lifecycle_service)]
UserIdDep = Annotated[int, Depends(parse_user_id)]
PayloadDep = Annotated[UserPayload, Depends(read_user_payload)]


@router.post("", status_code=status.HTTP_201_CREATED, response_class=PlainTextResponse)
async def create_user(payload: PayloadDep, service: ServiceDep):
    """
    新規ユーザー作成

    作成されたユーザーのIDをプレーンテキストで返します。
    """
    user_id = await service.create_user(payload.to_dto())
    return PlainTextResponse(user_id, status_code=status.HTTP_201_CREATED)


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def get_user(user_id: UserIdDep, service: ServiceDep):
    """ユーザー情報の取得（論理削除済みは 410）"""
    user = await service.get_user(user_id)
    return UserResponse.from_entity(user)


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(user_id: UserIdDep, payload: PayloadDep, service: ServiceDep):
    """ユーザー情報の更新"""
    await service.update_user(user_id, payload.to_dto())
    return MessageResponse(message="success")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: UserIdDep, service: ServiceDep):
    """ユーザーの論理削除"""
    await service.delete_user(user_id)
    return MessageResponse(message="success")
