import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from tortoise.exceptions import BaseORMException, IntegrityError

from ...domain.entity.user_entity import UserEntity
from ...domain.exception.storage_exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    StorageError,
)
from ...port.dto.user_dto import UserInfoDTO
from ...port.user_repository import UserRepository
from .models import User

T = TypeVar("T")

# SQLSTATE unique_violation
UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    origin = exc.__cause__ or (exc.args[0] if exc.args else None)
    if getattr(origin, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(exc).lower()


def _to_entity(user: User) -> UserEntity:
    return UserEntity(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        middle_name=user.middle_name,
        last_name=user.last_name,
        email=user.email,
        gender=user.gender,
        age=user.age,
        beg_date=user.beg_date,
        updated_at=user.updated_at,
        end_date=user.end_date,
    )


class TortoiseUserRepository(UserRepository):
    """
    Tortoise ORM を用いた UserRepository の実装

    各操作は単一のSQL文で実行されます。同時実行数は pool_size で制限され、
    上限を超えた呼び出しは空きが出るまで待機します。
    """

    def __init__(self, pool_size: int = 50):
        self._slots = asyncio.Semaphore(pool_size)

    async def create_row(self, user_info: UserInfoDTO) -> int:
        user = await self._execute("creating user", lambda: User.create(**user_info.to_dict()))
        return user.id

    async def fetch_row(self, user_id: int) -> UserEntity:
        user = await self._execute("getting user info", lambda: User.get_or_none(id=user_id))
        if user is None:
            raise RecordNotFoundError(user_id)
        return _to_entity(user)

    async def overwrite_row(self, user_id: int, user_info: UserInfoDTO) -> None:
        await self._execute(
            "updating user info",
            lambda: User.filter(id=user_id).update(
                **user_info.to_dict(),
                updated_at=datetime.now(timezone.utc),
            ),
        )

    async def mark_row_ended(self, user_id: int) -> bool:
        # end_date IS NULL の条件付き更新なので、並行削除では一方だけが成功する
        updated = await self._execute(
            "deleting user info",
            lambda: User.filter(id=user_id, end_date__isnull=True).update(
                end_date=datetime.now(timezone.utc)
            ),
        )
        return updated > 0

    async def _execute(self, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        async with self._slots:
            try:
                return await operation()
            except IntegrityError as e:
                if _is_unique_violation(e):
                    raise DuplicateKeyError("username", e) from e
                raise StorageError(f"error in {action}: {e}", e) from e
            except (BaseORMException, OSError, OverflowError, ValueError) as e:
                raise StorageError(f"error in {action}: {e}", e) from e
