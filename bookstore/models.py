# bookstore/models.py
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    STANDARD = "standard"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Union[str, int]) -> "Role":
        """Accept a role name or the legacy numeric flag (0 standard, 1 admin).

        Any other number is rejected instead of being read as elevated.
        """
        if isinstance(value, bool):
            raise ValueError(f"Unknown role: {value!r}")
        if isinstance(value, int):
            return cls.from_flag(value)
        text = str(value).strip().lower()
        if text.isdigit():
            return cls.from_flag(int(text))
        return cls(text)

    @classmethod
    def from_flag(cls, flag: int) -> "Role":
        if flag == 0:
            return cls.STANDARD
        if flag == 1:
            return cls.ADMIN
        raise ValueError(f"Unknown role flag: {flag!r}")


class CallerIdentity(BaseModel):
    """An authenticated caller, as resolved from a request token."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Role = Role.STANDARD

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
