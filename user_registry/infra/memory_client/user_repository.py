"""In-process UserRepository used by tests and the ``memory://`` DSN."""
import itertools
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict

from ...domain.entity.user_entity import UserEntity
from ...domain.exception.storage_exceptions import DuplicateKeyError, RecordNotFoundError
from ...port.dto.user_dto import UserInfoDTO
from ...port.user_repository import UserRepository


class InMemoryUserRepository(UserRepository):
    """Dict-backed store with the same conflict semantics as the SQL table.

    Method bodies never await, so each call is atomic on the event loop.
    """

    def __init__(self):
        self._rows: Dict[int, UserEntity] = {}
        self._ids = itertools.count(1)

    async def create_row(self, user_info: UserInfoDTO) -> int:
        self._ensure_username_free(user_info.username)
        user_id = next(self._ids)
        self._rows[user_id] = UserEntity(
            id=user_id,
            beg_date=datetime.now(timezone.utc),
            **user_info.to_dict(),
        )
        return user_id

    async def fetch_row(self, user_id: int) -> UserEntity:
        try:
            return replace(self._rows[user_id])
        except KeyError:
            raise RecordNotFoundError(user_id) from None

    async def overwrite_row(self, user_id: int, user_info: UserInfoDTO) -> None:
        row = self._rows.get(user_id)
        if row is None:
            return
        self._ensure_username_free(user_info.username, exclude_id=user_id)
        self._rows[user_id] = replace(
            row,
            updated_at=datetime.now(timezone.utc),
            **user_info.to_dict(),
        )

    async def mark_row_ended(self, user_id: int) -> bool:
        row = self._rows.get(user_id)
        if row is None or row.end_date is not None:
            return False
        self._rows[user_id] = replace(row, end_date=datetime.now(timezone.utc))
        return True

    def _ensure_username_free(self, username: str, exclude_id: int | None = None) -> None:
        for row in self._rows.values():
            if row.username == username and row.id != exclude_id:
                raise DuplicateKeyError("username")
