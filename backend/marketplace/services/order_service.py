from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union
from uuid import uuid4

from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from marketplace.models.product import ProductStatus
from marketplace.repositories.cart_repo import CartRepository
from marketplace.repositories.order_repo import OrderRepository
from marketplace.repositories.product_repo import ProductRepository
from marketplace.services.exceptions import (
    EmptyCartError,
    InvalidStatusError,
    NotFoundError,
    ProductUnavailableError,
)
from marketplace.services.notification_service import (
    NotificationService,
    NotificationSink,
)
from marketplace.utils.locks import product_locks
from marketplace.utils.logging import get_logger
from marketplace.utils.transactions import smart_transaction

log = get_logger("orders")


def _parse_order_status(status: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise InvalidStatusError(status, [s.value for s in OrderStatus]) from None


def _parse_payment_status(status: Union[str, PaymentStatus]) -> PaymentStatus:
    try:
        return PaymentStatus(status)
    except ValueError:
        raise InvalidStatusError(status, [s.value for s in PaymentStatus]) from None


class OrderService:
    def __init__(
        self,
        db: Session,
        cart_repo: Optional[CartRepository] = None,
        product_repo: Optional[ProductRepository] = None,
        order_repo: Optional[OrderRepository] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.db = db
        self.cart_repo = cart_repo or CartRepository(db)
        self.product_repo = product_repo or ProductRepository(db)
        self.order_repo = order_repo or OrderRepository(db)
        self.notifier = notifier or NotificationService(db)

    def _gen_order_number(self) -> str:
        return f"ORD-{uuid4().hex[:10].upper()}"

    def _notify(self, user_id: int, title: str, message: str, type: str) -> None:
        # best-effort: the workflow has already committed
        try:
            self.notifier.notify(user_id, title, message, type)
        except Exception:
            log.warning(
                "notification %r for user=%s failed", title, user_id, exc_info=True
            )

    def create_order(
        self,
        user_id: int,
        payment_method: str,
        shipping_address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Turn the user's whole cart into a pending order.

        Availability of every product is checked before anything is written.
        Inserting the order and its items, reserving the products and emptying
        the cart then happen in one transaction, under per-product locks, and
        the reservation only succeeds if every product is still available when
        the row is updated. On any failure nothing is left behind.
        """
        # 1) + 2) snapshot the cart and reject it early if anything is gone
        with smart_transaction(self.db):
            lines = self.cart_repo.lines_for(user_id)
            if not lines:
                raise EmptyCartError()
            unavailable = [
                line.product_id for line in lines if not line.product.is_purchasable()
            ]
            if unavailable:
                raise ProductUnavailableError(unavailable)
            product_ids = [line.product_id for line in lines]

        with product_locks(product_ids):
            with smart_transaction(self.db):
                # re-read under lock: the cart and products may have moved on
                lines = self.cart_repo.lines_for(user_id)
                if not lines:
                    raise EmptyCartError()
                product_ids = [line.product_id for line in lines]
                products = {p.id: p for p in self.product_repo.get_for_update(product_ids)}
                unavailable = [
                    pid
                    for pid in product_ids
                    if pid not in products or not products[pid].is_purchasable()
                ]
                if unavailable:
                    raise ProductUnavailableError(unavailable)

                # 3) freeze prices and compute totals
                items = []
                total_cents = 0
                for line in lines:
                    price = products[line.product_id].price_cents
                    subtotal = price * line.quantity
                    total_cents += subtotal
                    items.append(
                        OrderItem(
                            product_id=line.product_id,
                            quantity=line.quantity,
                            price_cents=price,
                            subtotal_cents=subtotal,
                        )
                    )

                # 4) order + items, reservation, empty cart
                order = Order(
                    order_number=self._gen_order_number(),
                    user_id=user_id,
                    total_cents=total_cents,
                    status=OrderStatus.PENDING.value,
                    payment_method=payment_method,
                    payment_status=PaymentStatus.PENDING.value,
                    shipping_address=shipping_address,
                    notes=notes,
                )
                self.order_repo.insert(order, items)

                reserved = self.product_repo.reserve(product_ids)
                if reserved != len(set(product_ids)):
                    raise ProductUnavailableError(
                        product_ids, "Products were taken by another order"
                    )
                self.cart_repo.clear(user_id)
                order_id = order.id
                order_number = order.order_number

        log.info(
            "order %s created for user=%s total_cents=%s items=%s",
            order_number,
            user_id,
            total_cents,
            len(items),
        )
        self._notify(
            user_id,
            "Order created",
            f"Your order {order_number} has been placed and is awaiting payment.",
            "order",
        )
        return self.order_repo.find(order_id, user_id)

    def get_order(self, order_id: int, user_id: int) -> Order:
        order = self.order_repo.find(order_id, user_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def list_orders(
        self,
        user_id: int,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        if status:
            status = _parse_order_status(status).value
        return self.order_repo.list_for_user(
            user_id, status=status, limit=limit, offset=offset
        )

    def update_order_status(
        self, order_id: int, user_id: int, status: Union[str, OrderStatus]
    ) -> None:
        # no transition graph: any of the five statuses may follow any other
        target = _parse_order_status(status)
        with smart_transaction(self.db):
            if not self.order_repo.update_status(order_id, user_id, target):
                raise NotFoundError("Order", order_id)
        log.info("order id=%s status -> %s", order_id, target.value)

    def update_payment_status(
        self, order_id: int, user_id: int, payment_status: Union[str, PaymentStatus]
    ) -> Order:
        """
        Record a payment status reported by the payment provider. A `paid`
        update also confirms the order and marks its products sold, in the
        same transaction. Re-applying `paid` leaves the same end state.

        A first `paid` on an order that no longer holds its products (it was
        cancelled, or another order has taken one of them since) raises
        ProductUnavailableError and changes nothing.
        """
        target = _parse_payment_status(payment_status)
        with smart_transaction(self.db):
            order = self.order_repo.find(order_id, user_id, for_update=True)
            if not order:
                raise NotFoundError("Order", order_id)
            newly_paid = (
                target == PaymentStatus.PAID
                and order.payment_status != PaymentStatus.PAID.value
            )
            order_number = order.order_number

            if newly_paid:
                self._sell_held_products(order)
            self.order_repo.update_payment_status(order, target)
            if target == PaymentStatus.PAID:
                order.status = OrderStatus.CONFIRMED.value
                self.db.flush()

        log.info("order id=%s payment_status -> %s", order_id, target.value)
        if newly_paid:
            self._notify(
                user_id,
                "Payment received",
                f"Payment for order {order_number} was received. Your order is confirmed.",
                "payment",
            )
        return self.order_repo.find(order_id, user_id)

    def _sell_held_products(self, order: Order) -> None:
        product_ids = sorted(set(self.order_repo.product_ids(order.id)))
        if order.status == OrderStatus.CANCELLED.value:
            raise ProductUnavailableError(
                product_ids, "Order was cancelled and no longer holds its products"
            )
        taken = self.order_repo.held_by_other_orders(order.id, product_ids)
        if taken:
            raise ProductUnavailableError(taken, "Products now belong to another order")
        sold = self.product_repo.transition(
            product_ids, ProductStatus.SOLD, from_statuses=(ProductStatus.RESERVED,)
        )
        if sold != len(product_ids):
            raise ProductUnavailableError(
                product_ids, "Products are no longer reserved for this order"
            )

    def expire_unpaid_orders(self, ttl_seconds: Optional[int] = None) -> List[int]:
        """
        Cancel orders that are still pending and unpaid after the reservation
        TTL and put their reserved products back on sale.
        Returns the ids of the cancelled orders.
        """
        ttl = settings.RESERVATION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl)
        expired = []
        with smart_transaction(self.db):
            for order in self.order_repo.find_unpaid_before(cutoff):
                order.status = OrderStatus.CANCELLED.value
                self.product_repo.transition(
                    self.order_repo.product_ids(order.id),
                    ProductStatus.AVAILABLE,
                    from_statuses=(ProductStatus.RESERVED,),
                )
                expired.append((order.id, order.user_id, order.order_number))
            self.db.flush()

        for order_id, user_id, order_number in expired:
            log.info("order %s expired unpaid; reservation released", order_number)
            self._notify(
                user_id,
                "Order cancelled",
                f"Order {order_number} was cancelled because payment was not received in time.",
                "order",
            )
        return [order_id for order_id, _, _ in expired]
