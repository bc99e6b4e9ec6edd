from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class UserInfoDTO:
    """
    ユーザー作成・更新用DTO（変更可能な属性のみ）
    """
    username: str
    first_name: str
    last_name: str
    email: str
    gender: str
    age: int
    middle_name: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
