from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    admin = "ADMIN"
    employer = "EMPLOYER"
    other = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> "UserRole":
        """Map a free-form role string onto the three roles masking knows about."""
        if not value:
            return cls.other
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.other


class GeoPointIn(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Caller(BaseModel):
    user_id: str | None = None
    role: UserRole = UserRole.other
