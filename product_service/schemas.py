from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict, field_validator

# NUMERIC(10,2) upper bound
MAX_PRICE = Decimal("99999999.99")


class ProductIn(BaseModel):
    """Body of POST /v1/products and PUT /v1/product/{id}."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, le=MAX_PRICE, max_digits=10, decimal_places=2, allow_inf_nan=False)
    image_url: str = Field(min_length=1, max_length=500)

    @field_validator("price", mode="before")
    @classmethod
    def price_is_number(cls, v):
        # JSON numbers only; true/false and strings are not prices
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal)):
            raise ValueError("Price must be a number")
        return v


class ProductOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: float
    image_url: str

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


class ValidationErrorOut(BaseModel):
    message: str
    errors: dict[str, list[str]]


class UserOut(BaseModel):
    id: str
    email: str | None = None
    is_admin: bool = False
