"""Unit tests for what a staff member sees: masking, phone and map links."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.schemas.customer import Customer
from app.utils.customer_view import build_customer_view, map_links, mask_name, phone_actions


class TestMaskName:
    def test_restricted_masks_each_part(self):
        assert mask_name("Ahmet Yilmaz", unrestricted=False) == "Ah*** Yi***"

    def test_short_parts_kept(self):
        assert mask_name("Al Ko Mehmet", unrestricted=False) == "Al Ko Me***"

    def test_unrestricted_sees_full_name(self):
        assert mask_name("Ahmet Yilmaz", unrestricted=True) == "Ahmet Yilmaz"


class TestPhoneActions:
    def test_spaces_removed(self):
        actions = phone_actions("0532 111 22 33", "Ah***")
        assert actions.call_url == "tel:05321112233"
        assert actions.sms_url.startswith("sms:05321112233?body=Dear%20Ah%2A%2A%2A")

    def test_no_phone(self):
        actions = phone_actions("", "x")
        assert actions.call_url is None
        assert actions.sms_url is None


class TestMapLinks:
    def test_coordinates_preferred(self):
        links = map_links(Customer(installation_number="1", address="Main St", latitude="41,0082", longitude="28.9784"))
        assert links.external_url == "https://www.google.com/maps/search/?api=1&query=41.0082,28.9784"
        assert "z=17" in links.embed_url

    def test_zero_coordinates_fall_back_to_address(self):
        links = map_links(Customer(installation_number="1", address="Main St 5", latitude="0", longitude="0"))
        assert links.external_url == "https://www.google.com/maps/search/?api=1&query=Main%20St%205"
        assert "z=15" in links.embed_url

    def test_nothing_to_show(self):
        links = map_links(Customer(installation_number="1", address="  ", latitude="abc"))
        assert links.embed_url is None
        assert links.external_url is None


def test_build_view_masks_for_restricted_session():
    customer = Customer(installation_number="1", name="Ahmet Yilmaz", phone="0532")
    view = build_customer_view(customer, unrestricted=False, cached=True)
    assert view.name == "Ah*** Yi***"
    assert view.cached is True
    assert view.phone == "0532"


def test_non_finite_coordinates_fall_back_to_address():
    customer = Customer.from_row({"installation_number": "1", "address": "Main St 5",
                                  "latitude": "NaN", "longitude": "29.0"})
    view = build_customer_view(customer, unrestricted=False)
    assert view.map.external_url == "https://www.google.com/maps/search/?api=1&query=Main%20St%205"
