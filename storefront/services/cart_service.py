# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    AuthRequiredError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services import pricing_service
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def require_user(user_id: int | None) -> int:
    if user_id is None:
        raise AuthRequiredError()
    return user_id


class CartService:
    """
    Use cases for the cart.
    commands (add, remove, release) change state
    query (get) only reads, prices always come from the live product rows
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_items(self, user_id: int) -> List[CartItemModel]:
        return self.repo.get_cart_items(require_user(user_id))

    def get_cart(self, user_id: int) -> Dict[str, Any]:
        items = self.get_items(user_id)

        return {
            "user_id": user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "product_name": i.product.name,
                    "quantity": i.quantity,
                    "unit_price": pricing_service.effective_unit_price(i.product),
                    "line_total": pricing_service.line_total(i),
                    "variant_selection": i.variant_selection,
                    "measurement_label": i.measurement_label,
                    "measurement_value": i.measurement_value,
                }
                for i in items
            ],
            "subtotal": pricing_service.subtotal(items),
        }

    #commands
    def add_product(
        self,
        user_id: int,
        product_id: int,
        quantity: Decimal,
        variant_label: str | None = None,
        measurement_value: str | None = None,
    ) -> Dict[str, Any]:
        require_user(user_id)

        quantity = Decimal(str(quantity))
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        product = self.products.get_active_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        variant_selection = self._resolve_variant(product, variant_label)
        measurement_label, measurement_value = self._resolve_measurement(product, measurement_value)

        try:
            #upsert on (user_id, product_id)
            existing_item = self.repo.get_cart_item(user_id, product_id)

            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart of user {user_id}, "
                    f"quantity {existing_item.quantity} -> {quantity}"
                )
                existing_item.quantity = quantity
                existing_item.variant_selection = variant_selection
                existing_item.measurement_label = measurement_label
                existing_item.measurement_value = measurement_value
                self.repo.add_cart_item(existing_item)
            else:
                logger.info(f"Adding product {product_id} to cart of user {user_id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=product_id,
                        quantity=quantity,
                        variant_selection=variant_selection,
                        measurement_label=measurement_label,
                        measurement_value=measurement_value,
                    )
                )
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to add product {product_id} for user {user_id}: {e}")
            raise StoreError("Could not update the cart") from e

        return self.get_cart(user_id)

    def remove_product(self, user_id: int, product_id: int) -> Dict[str, Any]:
        require_user(user_id)

        logger.info(f"Removing product {product_id} from cart of user {user_id}")
        try:
            removed = self.repo.delete_cart_item(user_id, product_id)
            if removed == 0:
                self.repo.rollback()
                raise NotFoundError(f"Product {product_id} is not in the cart")
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise StoreError("Could not update the cart") from e

        return self.get_cart(user_id)

    def release_cart(self, user_id: int, commit: bool = True) -> int:
        """
        Deletes every line of the user's cart. Returns how many rows went away,
        0 when the cart was already empty.
        commit=False leaves the delete inside the caller's transaction.
        """
        require_user(user_id)

        removed = self.repo.delete_all_items(user_id)
        if commit:
            try:
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                raise StoreError("Could not clear the cart") from e

        logger.info(f"Released cart of user {user_id}, removed {removed} item(s)")
        return removed

    @staticmethod
    def _resolve_variant(product: ProductModel, label: str | None) -> dict | None:
        options = product.variant_options
        if not options:
            return None

        if not label:
            raise ValidationError(f"Please select a {product.variant_title or 'variant'}")

        for option in options:
            if option["label"] == label:
                return {"label": option["label"], "image": option.get("image")}

        raise ValidationError(f"Unknown {product.variant_title or 'variant'} {label!r}")

    @staticmethod
    def _resolve_measurement(product: ProductModel, value: str | None) -> tuple:
        options = product.measurement_options
        if not options:
            return None, None

        if not value:
            raise ValidationError(f"Please select a {product.measurement_title or 'measurement option'}")

        if value not in options:
            raise ValidationError(f"Unknown {product.measurement_title or 'measurement'} {value!r}")

        return product.measurement_title, value
