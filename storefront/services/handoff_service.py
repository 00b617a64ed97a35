# storefront/services/handoff_service.py
from decimal import Decimal
from urllib.parse import quote, urlencode

from storefront.data.models.order import OrderModel
from storefront.utils import settings


def _amount(value) -> str:
    return f"{Decimal(str(value)):.2f}"


def _quantity(value) -> str:
    # 2.000 -> 2, 1.500 -> 1.5
    return f"{Decimal(str(value)).normalize():f}"


def upi_deep_link(order: OrderModel) -> str:
    params = [
        ("pa", settings.UPI_ID),
        ("pn", settings.UPI_PAYEE_NAME),
        ("tn", order.label),
        ("am", _amount(order.final_amount)),
        ("cu", settings.CURRENCY),
    ]
    return "upi://pay?" + "&".join(f"{k}={quote(str(v), safe='')}" for k, v in params)


def qr_code_url(order: OrderModel, size: int = 240) -> str:
    data = quote(upi_deep_link(order), safe="")
    return f"{settings.QR_SERVICE_URL}?size={size}x{size}&data={data}"


def format_items(order: OrderModel) -> str:
    return "\n".join(
        f"-{item.product_name} × {_quantity(item.quantity)} — ₹{_amount(item.total_price)}"
        for item in order.items
    )


def confirmation_message(order: OrderModel, reference: str) -> str:
    """Text the user sends to the operator after paying."""
    lines = [
        "✅ Order Confirmation",
        "",
        f"🧾 Transaction ID: {reference or ''}",
        "",
        f"🆔 Order ID: {order.label}",
        "",
        "📦 Items:",
        format_items(order),
        "",
        "🚚 Delivery Details:",
        f"Address: {order.shipping_address or ''}",
        "",
        f"💰 Total: ₹{_amount(order.final_amount)}",
        "",
        "🎉 Thank you for shopping with us",
    ]
    return "\n".join(lines)


def whatsapp_link(message: str, number: str | None = None) -> str:
    return f"https://wa.me/{number or settings.WHATSAPP_NUMBER}?" + urlencode({"text": message})
