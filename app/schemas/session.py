# app/schemas/session.py
from pydantic import BaseModel
from datetime import datetime


class LoginRequest(BaseModel):
    username: str
    password: str
    device_id: str = ""


class LoginResponse(BaseModel):
    token: str
    username: str
    is_admin: bool
    unrestricted: bool
    terms_required: bool


class SessionStatus(BaseModel):
    username: str
    is_admin: bool
    unrestricted: bool
    terms_accepted: bool
    service_open: bool
    created_at: datetime
