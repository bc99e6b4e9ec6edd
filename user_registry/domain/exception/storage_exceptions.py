"""ストレージ層が報告する結果の例外クラス

リポジトリ実装はエンジン固有のエラーをこれらに変換して送出します。
ドメイン例外への変換はユースケース層の責務です。
"""

from typing import Optional


class StorageError(Exception):
    """ストレージ操作の基底例外"""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause


class DuplicateKeyError(StorageError):
    """一意制約違反"""
    def __init__(self, column: str, cause: Optional[BaseException] = None):
        super().__init__(f"duplicate key on column: {column}", cause)
        self.column = column


class RecordNotFoundError(StorageError):
    """指定IDの行が存在しない"""
    def __init__(self, record_id: int):
        super().__init__(f"record not found: {record_id}")
        self.record_id = record_id
