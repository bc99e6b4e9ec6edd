from pydantic import BaseModel, Field
from typing import Optional, Annotated

from ...domain.entity.user_entity import UserEntity
from ...port.dto.user_dto import UserInfoDTO


class UserPayload(BaseModel):
    username: Annotated[str, Field(min_length=1, max_length=255)]
    first_name: Annotated[str, Field(max_length=255)]
    middle_name: Optional[Annotated[str, Field(max_length=255)]] = None
    last_name: Annotated[str, Field(max_length=255)]
    email: str
    gender: str
    age: int

    def to_dto(self) -> UserInfoDTO:
        return UserInfoDTO(
            username=self.username,
            first_name=self.first_name,
            middle_name=self.middle_name,
            last_name=self.last_name,
            email=self.email,
            gender=self.gender,
            age=self.age,
        )


class UserResponse(BaseModel):
    id: int
    username: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    gender: str
    age: int

    @classmethod
    def from_entity(cls, user: UserEntity) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            middle_name=user.middle_name,
            last_name=user.last_name,
            email=user.email,
            gender=user.gender,
            age=user.age,
        )


class MessageResponse(BaseModel):
    message: str
