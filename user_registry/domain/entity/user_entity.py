from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class UserEntity:
    """
    ユーザーのビジネスドメインモデル

    end_date が None であればアクティブ、値があれば論理削除済み。
    """
    id: int
    username: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    email: str
    gender: str
    age: int
    beg_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def is_gone(self) -> bool:
        return self.end_date is not None
