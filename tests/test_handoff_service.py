"""Tests for the UPI / WhatsApp hand-off builders."""

from decimal import Decimal
from urllib.parse import parse_qs, urlparse

from storefront.data.models import OrderItemModel, OrderModel
from storefront.services import handoff_service


def _order():
    return OrderModel(
        id=7,
        order_number="ORD-1700000000000-042",
        final_amount=Decimal("900.00"),
        shipping_address="12 MG Road, Bengaluru",
        items=[
            OrderItemModel(product_name="Engine Oil", quantity=Decimal("2.000"), total_price=Decimal("1000.00")),
            OrderItemModel(product_name="Grease", quantity=Decimal("1.500"), total_price=Decimal("225.50")),
        ],
    )


def test_upi_link_encodes_payee_order_and_amount():
    link = handoff_service.upi_deep_link(_order())
    query = parse_qs(urlparse(link).query)

    assert link.startswith("upi://pay?")
    assert query["tn"] == ["ORD-1700000000000-042"]
    assert query["am"] == ["900.00"]
    assert query["cu"] == ["INR"]
    assert query["pa"] == ["7449213304@pthdfc"]


def test_qr_url_wraps_upi_link():
    url = handoff_service.qr_code_url(_order())
    query = parse_qs(urlparse(url).query)

    assert query["size"] == ["240x240"]
    assert query["data"] == [handoff_service.upi_deep_link(_order())]


def test_message_lists_reference_items_and_address():
    message = handoff_service.confirmation_message(_order(), "UTR42")
    lines = message.split("\n")

    assert lines[0] == "✅ Order Confirmation"
    assert "🧾 Transaction ID: UTR42" in lines
    assert "🆔 Order ID: ORD-1700000000000-042" in lines
    assert "-Engine Oil × 2 — ₹1000.00" in lines
    assert "-Grease × 1.5 — ₹225.50" in lines
    assert "Address: 12 MG Road, Bengaluru" in lines


def test_whatsapp_link_carries_message():
    link = handoff_service.whatsapp_link("hello there\nline 2", number="911234567890")
    parsed = urlparse(link)

    assert parsed.netloc == "wa.me"
    assert parsed.path == "/911234567890"
    assert parse_qs(parsed.query)["text"] == ["hello there\nline 2"]
