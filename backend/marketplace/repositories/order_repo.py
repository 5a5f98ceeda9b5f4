from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from marketplace.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from marketplace.models.product import Product


def _with_details(query):
    # items -> product -> seller, plus the buyer
    return query.options(
        joinedload(Order.user),
        selectinload(Order.items)
        .joinedload(OrderItem.product)
        .joinedload(Product.user),
    )


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _live(self):
        return self.db.query(Order).filter(Order.deleted_at.is_(None))

    def insert(self, order: Order, items: List[OrderItem]) -> Order:
        self.db.add(order)
        self.db.flush()  # assigns order.id
        for it in items:
            it.order_id = order.id
            self.db.add(it)
        self.db.flush()
        return order

    def find(
        self, order_id: int, user_id: int, for_update: bool = False
    ) -> Optional[Order]:
        qry = self._live().filter(Order.id == order_id, Order.user_id == user_id)
        if for_update:
            qry = qry.populate_existing().with_for_update()
            return qry.first()
        return _with_details(qry).first()

    def product_ids(self, order_id: int) -> List[int]:
        rows = (
            self.db.query(OrderItem.product_id)
            .filter(OrderItem.order_id == order_id, OrderItem.deleted_at.is_(None))
            .all()
        )
        return [r[0] for r in rows]

    def held_by_other_orders(self, order_id: int, product_ids: List[int]) -> List[int]:
        """Products of `product_ids` that belong to another live, non-cancelled order."""
        if not product_ids:
            return []
        rows = (
            self.db.query(OrderItem.product_id)
            .join(Order, Order.id == OrderItem.order_id)
            .filter(
                OrderItem.product_id.in_(product_ids),
                OrderItem.order_id != order_id,
                OrderItem.deleted_at.is_(None),
                Order.deleted_at.is_(None),
                Order.status != OrderStatus.CANCELLED.value,
            )
            .distinct()
            .all()
        )
        return [r[0] for r in rows]

    def list_for_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        qry = self._live().filter(Order.user_id == user_id)
        if status:
            qry = qry.filter(Order.status == status)
        total = qry.with_entities(func.count(Order.id)).scalar() or 0
        orders = (
            _with_details(qry)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return orders, total

    def update_status(self, order_id: int, user_id: int, status: OrderStatus) -> int:
        return (
            self._live()
            .filter(Order.id == order_id, Order.user_id == user_id)
            .update({Order.status: status.value}, synchronize_session=False)
        )

    def update_payment_status(self, order: Order, payment_status: PaymentStatus) -> None:
        order.payment_status = payment_status.value
        self.db.flush()

    def find_unpaid_before(self, cutoff: datetime) -> List[Order]:
        return (
            self._live()
            .filter(
                Order.status == OrderStatus.PENDING.value,
                Order.payment_status == PaymentStatus.PENDING.value,
                Order.created_at < cutoff,
            )
            .order_by(Order.id)
            .with_for_update()
            .all()
        )
