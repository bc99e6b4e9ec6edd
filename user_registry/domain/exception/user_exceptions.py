"""
ユーザー関連の例外クラス

ユーザーのライフサイクル（作成・取得・更新・論理削除）で発生する例外を
ErrorKind で分類して統一的に管理します。呼び出し側は例外クラスまたは
``kind`` で判別します。
"""

import asyncio
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_EMAIL = "invalid_email"
    INVALID_GENDER = "invalid_gender"
    INVALID_AGE = "invalid_age"
    USERNAME_ALREADY_TAKEN = "username_already_taken"
    USER_DOES_NOT_EXIST = "user_does_not_exist"
    USER_IS_GONE = "user_is_gone"
    USER_HAS_BEEN_DELETED_ONCE = "user_has_been_deleted_once"
    STORAGE_FAILURE = "storage_failure"


class UserException(Exception):
    """ユーザー関連の基底例外クラス"""
    kind: ErrorKind = ErrorKind.STORAGE_FAILURE
    default_message = "internal server error, something went wrong"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_code(self) -> str:
        return self.kind.value


class ValidationFailedError(UserException):
    """入力値の検証に失敗した場合の基底例外"""


class InvalidEmailError(ValidationFailedError):
    kind = ErrorKind.INVALID_EMAIL
    default_message = "invalid email"


class InvalidGenderError(ValidationFailedError):
    kind = ErrorKind.INVALID_GENDER
    default_message = "invalid gender, available is: F/M/O"


class InvalidAgeError(ValidationFailedError):
    kind = ErrorKind.INVALID_AGE
    default_message = "invalid age, the age must be greater than 1 and less than 150"


class UsernameAlreadyTakenError(UserException):
    """指定のユーザー名は既に使用されています（論理削除済みユーザーを含む）。"""
    kind = ErrorKind.USERNAME_ALREADY_TAKEN
    default_message = "username is already taken"


class UserDoesNotExistError(UserException):
    """指定されたIDのユーザーが存在しない場合の例外"""
    kind = ErrorKind.USER_DOES_NOT_EXIST
    default_message = "user not exist"

    def __init__(self, user_id: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(cause=cause)
        self.user_id = user_id


class UserIsGoneError(UserException):
    """ユーザーは論理削除済みです。"""
    kind = ErrorKind.USER_IS_GONE
    default_message = "user is gone"

    def __init__(self, user_id: Optional[int] = None):
        super().__init__()
        self.user_id = user_id


class UserHasBeenDeletedOnceError(UserException):
    """論理削除済みのユーザーを再度削除しようとした場合の例外"""
    kind = ErrorKind.USER_HAS_BEEN_DELETED_ONCE
    default_message = "user has been deleted once"

    def __init__(self, user_id: Optional[int] = None):
        super().__init__()
        self.user_id = user_id


class StorageFailureError(UserException):
    """ストレージ層の想定外エラー（接続、タイムアウト、スキーマ不整合など）"""
    kind = ErrorKind.STORAGE_FAILURE

    @property
    def is_timeout(self) -> bool:
        cause = self.cause
        while cause is not None:
            if isinstance(cause, (TimeoutError, asyncio.TimeoutError)):
                return True
            cause = cause.__cause__
        return False
