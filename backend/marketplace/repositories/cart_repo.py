from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from marketplace.models.cart_item import CartItem
from marketplace.models.product import Product


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def lines_for(self, user_id: int) -> List[CartItem]:
        """Cart lines of a user, newest first, with product and seller loaded."""
        return (
            self.db.query(CartItem)
            .options(joinedload(CartItem.product).joinedload(Product.user))
            .filter(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
            .all()
        )

    def get(self, item_id: int, user_id: int) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.id == item_id, CartItem.user_id == user_id)
            .first()
        )

    def add_or_increment(self, user_id: int, product_id: int, qty: int) -> CartItem:
        item = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .with_for_update()
            .first()
        )
        if item:
            item.quantity = item.quantity + qty
        else:
            item = CartItem(user_id=user_id, product_id=product_id, quantity=qty)
            self.db.add(item)
        self.db.flush()
        return item

    def update_quantity(self, item_id: int, user_id: int, qty: int) -> int:
        return (
            self.db.query(CartItem)
            .filter(CartItem.id == item_id, CartItem.user_id == user_id)
            .update({CartItem.quantity: qty}, synchronize_session="evaluate")
        )

    def remove(self, item_id: int, user_id: int) -> int:
        return (
            self.db.query(CartItem)
            .filter(CartItem.id == item_id, CartItem.user_id == user_id)
            .delete(synchronize_session="evaluate")
        )

    def clear(self, user_id: int) -> int:
        return (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id)
            .delete(synchronize_session="evaluate")
        )
