# app/utils/customer_view.py
"""
Turns a Customer into what the staff screen shows: masked name,
call / SMS links and Google Maps links.
"""

import math
from typing import Optional
from urllib.parse import quote

from app.schemas.customer import Customer, CustomerView, MapLinks, PhoneActions

SMS_TEMPLATE = (
    "Dear {name}, we visited your address for the natural gas installation "
    "inspection but could not reach you."
)


def mask_name(full_name: str, unrestricted: bool) -> str:
    """Keep the first 2 letters of each name part, e.g. 'Ahmet Yilmaz' → 'Ah*** Yi***'."""
    if unrestricted:
        return full_name
    return " ".join(part if len(part) <= 2 else part[:2] + "***" for part in full_name.split(" "))


def parse_coordinate(value) -> Optional[float]:
    """'41,0082' and '41.0082' both parse; anything else, NaN and infinities included, is None."""
    if value is None:
        return None
    try:
        parsed = float(str(value).replace(",", ".").strip())
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def phone_actions(phone: str, display_name: str) -> PhoneActions:
    number = "".join(str(phone or "").split())
    if not number:
        return PhoneActions(call_url=None, sms_url=None)
    body = quote(SMS_TEMPLATE.format(name=display_name), safe="")
    return PhoneActions(call_url=f"tel:{number}", sms_url=f"sms:{number}?body={body}")


def map_links(customer: Customer) -> MapLinks:
    lat, lon = parse_coordinate(customer.latitude), parse_coordinate(customer.longitude)
    if lat is not None and lon is not None and lat != 0 and lon != 0:
        query, zoom = f"{_fmt(lat)},{_fmt(lon)}", 17
    elif customer.address and customer.address.strip():
        query, zoom = quote(customer.address, safe=""), 15
    else:
        return MapLinks(embed_url=None, external_url=None)

    return MapLinks(
        embed_url=f"https://maps.google.com/maps?q={query}&t=&z={zoom}&ie=UTF8&iwloc=&output=embed",
        external_url=f"https://www.google.com/maps/search/?api=1&query={query}",
    )


def _fmt(value: float) -> str:
    # 41.0 → "41", 41.0082 → "41.0082"
    return f"{value:g}" if value == int(value) else repr(value)


def build_customer_view(customer: Customer, unrestricted: bool, cached: bool = False) -> CustomerView:
    name = mask_name(customer.name, unrestricted)
    return CustomerView(
        installation_number=customer.installation_number,
        name=name,
        phone=customer.phone,
        address=customer.address,
        latitude=customer.latitude,
        longitude=customer.longitude,
        phone_actions=phone_actions(customer.phone, name),
        map=map_links(customer),
        cached=cached,
    )
