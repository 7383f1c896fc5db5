# app/schemas/stats.py
from pydantic import BaseModel
from typing import Optional

NEVER_LOGGED_IN = "Never logged in"


class UserActivityStat(BaseModel):
    username: str
    query_count: int
    last_login: str = NEVER_LOGGED_IN    # "DD.MM.YYYY HH:MM" local time


class AdminOverview(BaseModel):
    total_users: int
    total_queries: int
    most_active_user: Optional[str]
    total_customers: int
