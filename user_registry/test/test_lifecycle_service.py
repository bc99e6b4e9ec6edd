"""
UserLifecycleService Unit Tests

モックリポジトリを用いて、検証・状態チェック・ストレージ結果の変換をテスト
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from user_registry.domain.entity.user_entity import UserEntity
from user_registry.domain.exception.storage_exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    StorageError,
)
from user_registry.domain.exception.user_exceptions import (
    ErrorKind,
    InvalidAgeError,
    InvalidEmailError,
    InvalidGenderError,
    StorageFailureError,
    UserDoesNotExistError,
    UserHasBeenDeletedOnceError,
    UserIsGoneError,
    UsernameAlreadyTakenError,
)
from user_registry.port.user_repository import UserRepository
from user_registry.usecase.user_management.lifecycle_service import UserLifecycleService


class TestUserLifecycleService:
    """UserLifecycleServiceの包括的テスト"""

    @pytest.fixture
    def mock_repo(self):
        """モックUserRepositoryフィクスチャ"""
        return AsyncMock(spec=UserRepository)

    @pytest.fixture
    def service(self, mock_repo):
        return UserLifecycleService(mock_repo, timeout=1.0)

    @pytest.fixture
    def active_user(self, user_info):
        return UserEntity(id=1, **user_info.to_dict())

    @pytest.fixture
    def deleted_user(self, active_user):
        return replace(active_user, end_date=datetime.now(timezone.utc))

    # === 作成 ===

    @pytest.mark.asyncio
    async def test_create_user_returns_id(self, service, mock_repo, user_info):
        mock_repo.create_row.return_value = 1

        user_id = await service.create_user(user_info)

        assert user_id == "1"
        mock_repo.create_row.assert_awaited_once_with(user_info)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value,error", [
        ("email", "not-an-email", InvalidEmailError),
        ("gender", "X", InvalidGenderError),
        ("age", 0, InvalidAgeError),
        ("age", 151, InvalidAgeError),
    ])
    async def test_create_user_rejects_invalid_input(self, service, mock_repo, user_info, field, value, error):
        with pytest.raises(error):
            await service.create_user(replace(user_info, **{field: value}))

        mock_repo.create_row.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_user_reports_email_before_age(self, service, user_info):
        with pytest.raises(InvalidEmailError):
            await service.create_user(replace(user_info, email="bad", age=0))

    @pytest.mark.asyncio
    async def test_create_user_maps_duplicate_key(self, service, mock_repo, user_info):
        duplicate = DuplicateKeyError("username")
        mock_repo.create_row.side_effect = duplicate

        with pytest.raises(UsernameAlreadyTakenError) as exc_info:
            await service.create_user(user_info)

        assert exc_info.value.kind is ErrorKind.USERNAME_ALREADY_TAKEN
        assert exc_info.value.__cause__ is duplicate

    @pytest.mark.asyncio
    async def test_create_user_wraps_storage_error(self, service, mock_repo, user_info):
        mock_repo.create_row.side_effect = StorageError("connection refused")

        with pytest.raises(StorageFailureError) as exc_info:
            await service.create_user(user_info)

        assert not exc_info.value.is_timeout

    # === 取得 ===

    @pytest.mark.asyncio
    async def test_get_active_user(self, service, mock_repo, active_user):
        mock_repo.fetch_row.return_value = active_user

        user = await service.get_user(1)

        assert user == active_user
        mock_repo.fetch_row.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_get_missing_user(self, service, mock_repo):
        mock_repo.fetch_row.side_effect = RecordNotFoundError(999)

        with pytest.raises(UserDoesNotExistError) as exc_info:
            await service.get_user(999)

        assert exc_info.value.user_id == 999

    @pytest.mark.asyncio
    async def test_get_deleted_user_is_gone(self, service, mock_repo, deleted_user):
        mock_repo.fetch_row.return_value = deleted_user

        with pytest.raises(UserIsGoneError):
            await service.get_user(1)

    # === 更新 ===

    @pytest.mark.asyncio
    async def test_update_user(self, service, mock_repo, active_user, user_info):
        mock_repo.fetch_row.return_value = active_user
        changed = replace(user_info, last_name="Smith")

        await service.update_user(1, changed)

        mock_repo.overwrite_row.assert_awaited_once_with(1, changed)

    @pytest.mark.asyncio
    async def test_update_missing_user(self, service, mock_repo, user_info):
        mock_repo.fetch_row.side_effect = RecordNotFoundError(999)

        with pytest.raises(UserDoesNotExistError):
            await service.update_user(999, user_info)

        mock_repo.overwrite_row.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_deleted_user_is_gone(self, service, mock_repo, deleted_user, user_info):
        mock_repo.fetch_row.return_value = deleted_user

        with pytest.raises(UserIsGoneError):
            await service.update_user(1, user_info)

        mock_repo.overwrite_row.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_existence_checked_before_validation(self, service, mock_repo, deleted_user, user_info):
        mock_repo.fetch_row.return_value = deleted_user

        with pytest.raises(UserIsGoneError):
            await service.update_user(1, replace(user_info, email="bad"))

    @pytest.mark.asyncio
    async def test_update_invalid_input(self, service, mock_repo, active_user, user_info):
        mock_repo.fetch_row.return_value = active_user

        with pytest.raises(InvalidGenderError):
            await service.update_user(1, replace(user_info, gender="Q"))

        mock_repo.overwrite_row.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_to_taken_username(self, service, mock_repo, active_user, user_info):
        mock_repo.fetch_row.return_value = active_user
        mock_repo.overwrite_row.side_effect = DuplicateKeyError("username")

        with pytest.raises(UsernameAlreadyTakenError):
            await service.update_user(1, replace(user_info, username="bob"))

    # === 削除 ===

    @pytest.mark.asyncio
    async def test_delete_active_user(self, service, mock_repo, active_user):
        mock_repo.fetch_row.return_value = active_user
        mock_repo.mark_row_ended.return_value = True

        await service.delete_user(1)

        mock_repo.mark_row_ended.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, service, mock_repo):
        mock_repo.fetch_row.side_effect = RecordNotFoundError(999)

        with pytest.raises(UserDoesNotExistError):
            await service.delete_user(999)

        mock_repo.mark_row_ended.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_deleted_user(self, service, mock_repo, deleted_user):
        mock_repo.fetch_row.return_value = deleted_user

        with pytest.raises(UserHasBeenDeletedOnceError):
            await service.delete_user(1)

        mock_repo.mark_row_ended.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_lost_race(self, service, mock_repo, active_user):
        """並行削除に負けた場合は削除済みとして報告する"""
        mock_repo.fetch_row.return_value = active_user
        mock_repo.mark_row_ended.return_value = False

        with pytest.raises(UserHasBeenDeletedOnceError):
            await service.delete_user(1)

    @pytest.mark.asyncio
    async def test_delete_storage_error(self, service, mock_repo, active_user):
        mock_repo.fetch_row.return_value = active_user
        mock_repo.mark_row_ended.side_effect = StorageError("disk I/O error")

        with pytest.raises(StorageFailureError):
            await service.delete_user(1)

    # === 期限 ===

    @pytest.mark.asyncio
    async def test_deadline_cancels_store_call(self, service, mock_repo):
        cancelled = asyncio.Event()

        async def slow_fetch(user_id):
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        mock_repo.fetch_row.side_effect = slow_fetch

        with pytest.raises(StorageFailureError) as exc_info:
            await service.get_user(1, timeout=0.01)

        assert exc_info.value.is_timeout
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_default_deadline_from_constructor(self, mock_repo, user_info):
        service = UserLifecycleService(mock_repo, timeout=0.01)

        async def slow_create(_):
            await asyncio.sleep(5)

        mock_repo.create_row.side_effect = slow_create

        with pytest.raises(StorageFailureError):
            await service.create_user(user_info)
