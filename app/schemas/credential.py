# app/schemas/credential.py
from pydantic import BaseModel, field_validator
from typing import Optional

UNRESTRICTED_DEVICE = "ANY_DEVICE"


class Credential(BaseModel):
    username: str
    password: str
    allowed_device_id: Optional[str] = None   # None = bind on first login, ANY_DEVICE = unrestricted

    @property
    def is_unrestricted(self) -> bool:
        return self.allowed_device_id == UNRESTRICTED_DEVICE

    @classmethod
    def from_row(cls, row: dict) -> "Credential":
        return cls(
            username=str(row["username"]),
            password=str(row.get("password") or ""),
            allowed_device_id=row.get("allowed_device_id") or None,
        )


class CredentialIn(BaseModel):
    """Admin add/edit form. `unrestricted` wins over allowed_device_id."""
    username: str
    password: str
    allowed_device_id: Optional[str] = None
    unrestricted: bool = False

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def to_credential(self) -> Credential:
        if self.unrestricted:
            device = UNRESTRICTED_DEVICE
        else:
            device = (self.allowed_device_id or "").strip() or None
        return Credential(username=self.username, password=self.password, allowed_device_id=device)


class AdminUserOut(BaseModel):
    username: str
    password: str
    allowed_device_id: Optional[str]
    unrestricted: bool
    query_count: int
    last_login: str
