"""Request/response schemas for /api/products. JSON uses camelCase."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from product_service.config import CATEGORY_MAX_LEN, DESCRIPTION_MAX_LEN, NAME_MAX_LEN


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ProductCreate(_CamelModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LEN)
    image: str = ""
    price: Decimal = Field(..., gt=0, decimal_places=2)
    category: str = Field(default="", max_length=CATEGORY_MAX_LEN)
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(_CamelModel):
    name: str | None = Field(default=None, max_length=NAME_MAX_LEN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    image: str | None = None
    price: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    stock_quantity: int | None = Field(default=None, ge=0)


class ProductResponse(_CamelModel):
    id: int
    name: str
    description: str
    image: str
    price: Decimal
    category: str
    stock_quantity: int
