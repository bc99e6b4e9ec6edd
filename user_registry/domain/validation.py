"""User attribute validation.

Rules are checked in a fixed order (email, gender, age) and the first
failure is raised; errors are not aggregated.
"""
import re

from .exception.user_exceptions import (
    InvalidAgeError,
    InvalidEmailError,
    InvalidGenderError,
)

EMAIL_PATTERN = re.compile(r"[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,4}")
ALLOWED_GENDERS = frozenset({"M", "F", "O"})
MIN_AGE = 1
MAX_AGE = 150


def valid_email(email: str) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def valid_gender(gender: str) -> bool:
    return isinstance(gender, str) and gender.upper() in ALLOWED_GENDERS


def valid_age(age: int) -> bool:
    # bool is an int subclass
    if isinstance(age, bool) or not isinstance(age, int):
        return False
    return MIN_AGE <= age <= MAX_AGE


def validate_user_attributes(email: str, gender: str, age: int) -> None:
    if not valid_email(email):
        raise InvalidEmailError()
    if not valid_gender(gender):
        raise InvalidGenderError()
    if not valid_age(age):
        raise InvalidAgeError()
