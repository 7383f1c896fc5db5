# app/schemas/customer.py
from pydantic import BaseModel
from typing import Optional


class Customer(BaseModel):
    installation_number: str
    name: str = ""
    phone: str = ""
    address: str = ""
    latitude: Optional[str] = None    # numeric string, "," or "." decimal
    longitude: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Customer":
        """Map a customers table row into the app shape."""
        lat, lon = row.get("latitude"), row.get("longitude")
        return cls(
            installation_number=str(row["installation_number"]),
            name=row.get("name") or "",
            phone=row.get("phone") or "",
            address=row.get("address") or "",
            latitude=str(lat) if lat is not None else None,
            longitude=str(lon) if lon is not None else None,
        )


class PhoneActions(BaseModel):
    call_url: Optional[str]
    sms_url: Optional[str]


class MapLinks(BaseModel):
    embed_url: Optional[str]
    external_url: Optional[str]


class CustomerView(BaseModel):
    """What a staff member sees after a successful lookup."""
    installation_number: str
    name: str                 # masked unless the session is unrestricted
    phone: str
    address: str
    latitude: Optional[str]
    longitude: Optional[str]
    phone_actions: PhoneActions
    map: MapLinks
    cached: bool = False


class RecentSearches(BaseModel):
    items: list[str]


class ImportResult(BaseModel):
    success: int
    error_count: int
    error: Optional[str] = None


class ImportReport(ImportResult):
    total: int
    log: list[str]
