from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from .models import Stock


class ApiModel(BaseModel):
    """JSON names are PascalCase; snake_case is accepted on input as well."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, from_attributes=True)


class LoginRequest(ApiModel):
    # both optional: an incomplete login is answered with 401, not 400
    login_name: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(ApiModel):
    token: str


class RegisterRequest(ApiModel):
    email: str
    password: str
    username: str


class CustomerIn(ApiModel):
    id: Optional[int] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CustomerOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None


class OrderIn(ApiModel):
    id: Optional[int] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    customer_id: int


class OrderOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    customer_id: int


class OrderItemIn(ApiModel):
    id: Optional[int] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    stock: Optional[Stock] = None
    order_id: int


class OrderItemOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    stock: Optional[Stock] = None
    order_id: int
