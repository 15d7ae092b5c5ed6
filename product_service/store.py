import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceError
from .models import Product
from .schemas import ProductIn

logger = logging.getLogger(__name__)


class ProductStore:
    """
    Persistence for product rows.

    Every mutating call is its own unit of work: it commits before returning,
    or rolls back and raises PersistenceError. Missing rows are reported as
    None (find_by_id, update) or False (delete), never as exceptions.
    """

    def __init__(self, session: Session):
        self.session = session

    def _rollback(self, action: str) -> PersistenceError:
        self.session.rollback()
        logger.exception("Product %s failed", action)
        return PersistenceError(f"Failed to {action} product")

    def create(self, fields: ProductIn) -> Product:
        p = Product(
            name=fields.name,
            price=fields.price,
            image_url=fields.image_url,
        )
        try:
            self.session.add(p)
            self.session.commit()
            self.session.refresh(p)
        except SQLAlchemyError as e:
            raise self._rollback("create") from e

        logger.info("Created product id=%s name=%s", p.id, p.name)
        return p

    def find_by_id(self, product_id: int) -> Product | None:
        try:
            return self.session.get(Product, product_id)
        except SQLAlchemyError as e:
            raise self._rollback("load") from e

    def find_by_name_contains(self, substring: str) -> Sequence[Product]:
        stmt = select(Product).where(Product.name.contains(substring)).order_by(Product.id)
        try:
            return self.session.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise self._rollback("search") from e

    def list_all(self) -> Sequence[Product]:
        try:
            return self.session.scalars(select(Product).order_by(Product.id)).all()
        except SQLAlchemyError as e:
            raise self._rollback("list") from e

    def update(self, product_id: int, fields: ProductIn) -> Product | None:
        p = self.find_by_id(product_id)
        if p is None:
            return None

        # Wholesale overwrite, even when a value is unchanged
        p.name = fields.name
        p.price = fields.price
        p.image_url = fields.image_url
        try:
            self.session.commit()
            self.session.refresh(p)
        except SQLAlchemyError as e:
            raise self._rollback("update") from e

        logger.info("Updated product id=%s", p.id)
        return p

    def delete(self, product_id: int) -> bool:
        p = self.find_by_id(product_id)
        if p is None:
            return False
        try:
            self.session.delete(p)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._rollback("delete") from e

        logger.info("Deleted product id=%s", product_id)
        return True
