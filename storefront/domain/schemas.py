# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for registering a user known to the auth collaborator."""

    id: int = Field(..., gt=0, description="User ID (must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    is_admin: bool = False


class UserRead(BaseModel):
    id: int
    name: str
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)


class VariantSelection(BaseModel):
    label: str
    image: str | None = None


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: Decimal = Field(..., gt=0, description="In the product's base measurement")
    variant_label: str | None = None
    measurement_value: str | None = None


class CartItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    variant_selection: VariantSelection | None = None
    measurement_label: str | None = None
    measurement_value: str | None = None


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    subtotal: Decimal


class CartReleaseOut(BaseModel):
    user_id: int
    removed: int


class CouponIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class CouponOut(BaseModel):
    code: str
    discount_type: str
    discount_value: Decimal
    min_order_amount: Decimal | None = None
    max_discount_amount: Decimal | None = None
    valid_until: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class QuoteIn(BaseModel):
    coupon_code: str | None = None


class QuoteOut(BaseModel):
    subtotal: Decimal
    discount: Decimal
    final: Decimal
    coupon: CouponOut | None = None
    coupon_error: str | None = None


class CheckoutIn(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_address: str = Field(..., max_length=1000)
    coupon_code: str | None = None


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: Decimal
    price_per_unit: Decimal
    total_price: Decimal
    variant_selection: VariantSelection | None = None
    measurement_label: str | None = None
    measurement_value: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    coupon_code: str | None = None
    shipping_address: str
    status: str
    payment_status: str
    payment_reference: str | None = None
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class PaymentInstructionsOut(BaseModel):
    order_id: int
    order_label: str
    amount: Decimal
    discount_amount: Decimal
    currency: str
    upi_link: str
    qr_code_url: str
    payment_status: str


class ReferenceIn(BaseModel):
    reference: str = Field(..., max_length=64, description="UTR / transaction id")


class ConfirmationOut(BaseModel):
    order_id: int
    state: str
    reference: str | None = None
    can_complete: bool
    remaining_seconds: float


class HandoffOut(ConfirmationOut):
    message: str
    whatsapp_link: str
