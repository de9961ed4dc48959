"""
Pydantic schemas for the shop backend.

Field names follow the JSON wire format (camelCase). ``*Create`` schemas
validate POST bodies, ``*Update`` schemas validate PUT bodies where every
field is optional and only supplied fields are applied.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

T = TypeVar("T")


class UserCreate(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    role: Optional[str] = Field(default=None, max_length=50)


class UserUpdate(BaseModel):
    firstName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    role: Optional[str] = Field(default=None, max_length=50)


class UserResponse(BaseModel):
    id: int
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    age: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    completed: bool = False
    userId: Optional[int] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    completed: Optional[bool] = None
    userId: Optional[int] = None


class TaskResponse(BaseModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    completed: bool = False
    userId: Optional[int] = None


class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=200)
    desc: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(..., ge=0)
    basePrice: Optional[float] = Field(default=None, ge=0)
    stocked: bool = True


class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(default=None, min_length=1, max_length=64)
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    desc: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    basePrice: Optional[float] = Field(default=None, ge=0)
    stocked: Optional[bool] = None


class ProductResponse(BaseModel):
    id: int
    sku: Optional[str] = None
    title: Optional[str] = None
    desc: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    basePrice: Optional[float] = None
    stocked: bool = True


class BasketItem(BaseModel):
    productId: int
    quantity: int = Field(default=1, ge=1)


class BasketCreate(BaseModel):
    userId: Optional[int] = None
    items: list[BasketItem] = Field(default_factory=list)


class BasketUpdate(BaseModel):
    userId: Optional[int] = None
    items: Optional[list[BasketItem]] = None


class BasketResponse(BasketCreate):
    id: int


class ListResponse(BaseModel, Generic[T]):
    total: int
    items: list[T]


class MessageResponse(BaseModel):
    code: int
    message: str


class ErrorResponse(BaseModel):
    code: str
    message: str
