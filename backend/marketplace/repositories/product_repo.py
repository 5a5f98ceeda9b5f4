from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from marketplace.models.product import Product, ProductStatus
from marketplace.services.exceptions import NotFoundError


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_for_update(self, product_ids: Iterable[int]) -> List[Product]:
        """
        Load products with a row lock, bypassing whatever the identity map holds
        so the caller sees the committed status.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return []
        return (
            self.db.query(Product)
            .filter(Product.id.in_(ids))
            .order_by(Product.id)
            .populate_existing()
            .with_for_update()
            .all()
        )

    def set_status(self, product_id: int, status: ProductStatus) -> None:
        updated = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .update({Product.status: status.value}, synchronize_session=False)
        )
        if not updated:
            raise NotFoundError("Product", product_id)

    def reserve(self, product_ids: Iterable[int]) -> int:
        """
        Flip available+active products to reserved. Returns the number of rows
        changed, which is short of len(product_ids) when another transaction
        got there first.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return 0
        return (
            self.db.query(Product)
            .filter(
                Product.id.in_(ids),
                Product.status == ProductStatus.AVAILABLE.value,
                Product.is_active == True,  # noqa: E712
            )
            .update(
                {Product.status: ProductStatus.RESERVED.value},
                synchronize_session=False,
            )
        )

    def transition(
        self,
        product_ids: Iterable[int],
        to_status: ProductStatus,
        from_statuses: Optional[Iterable[ProductStatus]] = None,
    ) -> int:
        ids = sorted(set(product_ids))
        if not ids:
            return 0
        qry = self.db.query(Product).filter(Product.id.in_(ids))
        if from_statuses is not None:
            qry = qry.filter(Product.status.in_([s.value for s in from_statuses]))
        return qry.update(
            {Product.status: to_status.value}, synchronize_session=False
        )
