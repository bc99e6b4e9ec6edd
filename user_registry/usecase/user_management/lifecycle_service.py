"""
ユーザーライフサイクルのユースケース実装

作成・取得・更新・論理削除の各操作で検証と状態チェックを行い、
ストレージ層の結果をドメイン例外に変換します。このクラス自体は
状態を持たず、ストレージのロジックも含みません。
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from ...domain.entity.user_entity import UserEntity
from ...domain.exception.storage_exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    StorageError,
)
from ...domain.exception.user_exceptions import (
    StorageFailureError,
    UserDoesNotExistError,
    UserHasBeenDeletedOnceError,
    UserIsGoneError,
    UsernameAlreadyTakenError,
)
from ...domain.validation import validate_user_attributes
from ...port.dto.user_dto import UserInfoDTO
from ...port.user_repository import UserRepository

T = TypeVar("T")


class UserLifecycleService:
    """
    ユーザーライフサイクルサービス

    各操作は呼び出しごとの期限（timeout 秒）内で実行されます。期限を
    超えた場合、実行中のストレージ呼び出しはキャンセルされ
    StorageFailureError が送出されます。
    """

    def __init__(self, user_repository: UserRepository, timeout: Optional[float] = None):
        self.user_repository = user_repository
        self.timeout = timeout

    async def create_user(self, user_info: UserInfoDTO, timeout: Optional[float] = None) -> str:
        """
        入力を検証してユーザーを作成します。

        Returns:
            str: 作成されたユーザーのID

        Raises:
            InvalidEmailError / InvalidGenderError / InvalidAgeError: 検証エラー
            UsernameAlreadyTakenError: username が既に使用されている場合
            StorageFailureError: ストレージ層のエラーまたはタイムアウト
        """
        return await self._with_deadline(self._create_user(user_info), timeout)

    async def get_user(self, user_id: int, timeout: Optional[float] = None) -> UserEntity:
        """
        IDでユーザーを取得します。論理削除済みのユーザーは返しません。

        Raises:
            UserDoesNotExistError: 行が存在しない場合
            UserIsGoneError: 論理削除済みの場合
        """
        return await self._with_deadline(self._get_user(user_id), timeout)

    async def update_user(
        self, user_id: int, user_info: UserInfoDTO, timeout: Optional[float] = None
    ) -> None:
        """
        ユーザー情報を更新します。

        まず get_user と同じ取得を行い、そのエラーはそのまま伝播します。
        その後作成時と同じ検証を行い、変更可能な全属性を上書きします。
        """
        await self._with_deadline(self._update_user(user_id, user_info), timeout)

    async def delete_user(self, user_id: int, timeout: Optional[float] = None) -> None:
        """
        ユーザーを論理削除します（end_date を設定）。

        Raises:
            UserDoesNotExistError: 行が存在しない場合
            UserHasBeenDeletedOnceError: 既に論理削除済みの場合
        """
        await self._with_deadline(self._delete_user(user_id), timeout)

    async def _create_user(self, user_info: UserInfoDTO) -> str:
        validate_user_attributes(user_info.email, user_info.gender, user_info.age)

        try:
            user_id = await self.user_repository.create_row(user_info)
        except DuplicateKeyError as e:
            raise UsernameAlreadyTakenError(cause=e) from e
        except StorageError as e:
            raise StorageFailureError(e.message, cause=e) from e
        return str(user_id)

    async def _get_user(self, user_id: int) -> UserEntity:
        user = await self._fetch(user_id)
        if user.is_gone:
            raise UserIsGoneError(user_id)
        return user

    async def _update_user(self, user_id: int, user_info: UserInfoDTO) -> None:
        await self._get_user(user_id)
        validate_user_attributes(user_info.email, user_info.gender, user_info.age)

        try:
            await self.user_repository.overwrite_row(user_id, user_info)
        except DuplicateKeyError as e:
            raise UsernameAlreadyTakenError(cause=e) from e
        except StorageError as e:
            raise StorageFailureError(e.message, cause=e) from e

    async def _delete_user(self, user_id: int) -> None:
        # get_user と違い論理削除済みの行も受け取り、未作成と削除済みを区別する
        user = await self._fetch(user_id)
        if user.is_gone:
            raise UserHasBeenDeletedOnceError(user_id)

        try:
            ended = await self.user_repository.mark_row_ended(user_id)
        except StorageError as e:
            raise StorageFailureError(e.message, cause=e) from e

        # 同一IDへの並行削除に負けた場合
        if not ended:
            raise UserHasBeenDeletedOnceError(user_id)

    async def _fetch(self, user_id: int) -> UserEntity:
        try:
            return await self.user_repository.fetch_row(user_id)
        except RecordNotFoundError as e:
            raise UserDoesNotExistError(user_id, cause=e) from e
        except StorageError as e:
            raise StorageFailureError(e.message, cause=e) from e

    async def _with_deadline(self, operation: Awaitable[T], timeout: Optional[float]) -> T:
        limit = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(operation, limit)
        except asyncio.TimeoutError as e:
            raise StorageFailureError(f"operation exceeded deadline of {limit}s", cause=e) from e
