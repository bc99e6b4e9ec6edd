from typing import Protocol

from ..domain.entity.user_entity import UserEntity
from .dto.user_dto import UserInfoDTO


class UserRepository(Protocol):
    """
    ユーザーデータの永続化インターフェース。

    実装はエンジン固有のエラーを ``domain.exception.storage_exceptions`` の
    例外に変換して送出します。論理削除状態の判定は行いません。
    """

    async def create_row(self, user_info: UserInfoDTO) -> int:
        """
        新しい行を作成してIDを返します。beg_date はストア側で設定されます。

        Raises:
            DuplicateKeyError: username の一意制約に違反した場合
        """
        ...

    async def fetch_row(self, user_id: int) -> UserEntity:
        """
        IDで行を取得します（end_date を含む）。

        Raises:
            RecordNotFoundError: 行が存在しない場合
        """
        ...

    async def overwrite_row(self, user_id: int, user_info: UserInfoDTO) -> None:
        """変更可能な全カラムを無条件に上書きします。"""
        ...

    async def mark_row_ended(self, user_id: int) -> bool:
        """
        end_date を現在時刻に設定します。

        Returns:
            bool: この呼び出しで end_date が設定された場合 True、
                  既に設定済みだった場合 False
        """
        ...
