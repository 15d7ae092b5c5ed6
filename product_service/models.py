from decimal import Decimal
from sqlalchemy import String, Text, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(255), index=True)

    # Not settable through the API; kept for rows written by other tools
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # money => NUMERIC, not FLOAT
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    image_url: Mapped[str] = mapped_column(String(500))
