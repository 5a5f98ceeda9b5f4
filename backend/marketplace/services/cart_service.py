from typing import Dict

from sqlalchemy.orm import Session

from marketplace.models.cart_item import CartItem
from marketplace.repositories.cart_repo import CartRepository
from marketplace.repositories.product_repo import ProductRepository
from marketplace.services.exceptions import (
    InvalidQuantityError,
    NotFoundError,
    ProductUnavailableError,
)
from marketplace.utils.logging import get_logger
from marketplace.utils.transactions import smart_transaction

log = get_logger("cart")


class CartService:
    def __init__(self, db: Session, cart_repo=None, product_repo=None):
        self.db = db
        self.cart_repo = cart_repo or CartRepository(db)
        self.product_repo = product_repo or ProductRepository(db)

    def get_cart(self, user_id: int) -> Dict:
        lines = self.cart_repo.lines_for(user_id)
        total = sum(it.quantity * it.product.price_cents for it in lines)
        return {"items": lines, "total_cents": total}

    def add_item(self, user_id: int, product_id: int, qty: int) -> CartItem:
        if qty <= 0:
            raise InvalidQuantityError(qty)
        with smart_transaction(self.db):
            product = self.product_repo.get(product_id)
            if not product or not product.is_purchasable():
                raise ProductUnavailableError([product_id], "Product not available")
            item = self.cart_repo.add_or_increment(user_id, product_id, qty)
        log.debug("user=%s added product=%s qty=%s", user_id, product_id, qty)
        return item

    def update_quantity(self, item_id: int, user_id: int, qty: int) -> CartItem:
        if qty <= 0:
            raise InvalidQuantityError(qty)
        with smart_transaction(self.db):
            if not self.cart_repo.update_quantity(item_id, user_id, qty):
                raise NotFoundError("Cart item", item_id)
        return self.cart_repo.get(item_id, user_id)

    def remove_item(self, item_id: int, user_id: int) -> None:
        with smart_transaction(self.db):
            if not self.cart_repo.remove(item_id, user_id):
                raise NotFoundError("Cart item", item_id)

    def clear(self, user_id: int) -> int:
        with smart_transaction(self.db):
            removed = self.cart_repo.clear(user_id)
        log.debug("user=%s cleared %s cart lines", user_id, removed)
        return removed
