"""
Strawberry GraphQL schema over the same repositories as the REST routes.

Resolvers only map fields; input validation reuses the pydantic schemas.
"""

import dataclasses
from typing import Optional

import strawberry
from fastapi import Depends
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from shop_backend import schemas
from shop_backend.db import DbClient
from shop_backend.dependencies import get_db_client
from shop_backend.repository import (
    Repository,
    baskets_repository,
    products_repository,
    tasks_repository,
    users_repository,
)


@strawberry.type
class User:
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    age: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_document(cls, doc: dict) -> "User":
        return cls(
            id=doc["id"],
            first_name=doc.get("firstName"),
            last_name=doc.get("lastName"),
            age=doc.get("age"),
            email=doc.get("email"),
            role=doc.get("role"),
        )


@strawberry.type
class Task:
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    completed: bool = False
    user_id: Optional[int] = None

    @classmethod
    def from_document(cls, doc: dict) -> "Task":
        return cls(
            id=doc["id"],
            title=doc.get("title"),
            description=doc.get("description"),
            completed=bool(doc.get("completed")),
            user_id=doc.get("userId"),
        )


@strawberry.type
class Product:
    id: int
    sku: Optional[str] = None
    title: Optional[str] = None
    desc: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    base_price: Optional[float] = None
    stocked: bool = True

    @classmethod
    def from_document(cls, doc: dict) -> "Product":
        return cls(
            id=doc["id"],
            sku=doc.get("sku"),
            title=doc.get("title"),
            desc=doc.get("desc"),
            image=doc.get("image"),
            price=doc.get("price"),
            base_price=doc.get("basePrice"),
            stocked=doc.get("stocked", True),
        )


@strawberry.type
class BasketItem:
    product_id: int
    quantity: int


@strawberry.type
class Basket:
    id: int
    user_id: Optional[int] = None
    items: list[BasketItem] = strawberry.field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict) -> "Basket":
        return cls(
            id=doc["id"],
            user_id=doc.get("userId"),
            items=[
                BasketItem(product_id=item["productId"], quantity=item["quantity"])
                for item in doc.get("items") or []
            ],
        )


@strawberry.input
class UserInput:
    first_name: Optional[str] = strawberry.UNSET
    last_name: Optional[str] = strawberry.UNSET
    age: Optional[int] = strawberry.UNSET
    email: Optional[str] = strawberry.UNSET
    role: Optional[str] = strawberry.UNSET


@strawberry.input
class TaskInput:
    title: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    completed: Optional[bool] = strawberry.UNSET
    user_id: Optional[int] = strawberry.UNSET


@strawberry.input
class ProductInput:
    sku: Optional[str] = strawberry.UNSET
    title: Optional[str] = strawberry.UNSET
    desc: Optional[str] = strawberry.UNSET
    image: Optional[str] = strawberry.UNSET
    price: Optional[float] = strawberry.UNSET
    base_price: Optional[float] = strawberry.UNSET
    stocked: Optional[bool] = strawberry.UNSET


@strawberry.input
class BasketItemInput:
    product_id: int
    quantity: int = 1


@strawberry.input
class BasketInput:
    user_id: Optional[int] = strawberry.UNSET
    items: Optional[list[BasketItemInput]] = strawberry.UNSET


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _to_fields(value) -> dict:
    """Convert a strawberry input to a camelCase dict, skipping unset fields."""
    data = {}
    for name, field_value in vars(value).items():
        if field_value is strawberry.UNSET:
            continue
        if isinstance(field_value, list):
            field_value = [
                _to_fields(item) if dataclasses.is_dataclass(item) else item
                for item in field_value
            ]
        data[_camel(name)] = field_value
    return data


def _repository(info: Info, factory) -> Repository:
    return factory(info.context["db"])


def _validated(schema: type, value, partial: bool = False) -> dict:
    model = schema.model_validate(_to_fields(value))
    if partial:
        return model.model_dump(exclude_unset=True, exclude_none=True)
    return model.model_dump()


@strawberry.type
class Query:
    @strawberry.field
    def users(self, info: Info) -> list[User]:
        items, _ = _repository(info, users_repository).list()
        return [User.from_document(doc) for doc in items]

    @strawberry.field
    def user(self, info: Info, id: int) -> Optional[User]:
        doc = _repository(info, users_repository).find(id)
        return User.from_document(doc) if doc else None

    @strawberry.field
    def tasks(self, info: Info) -> list[Task]:
        items, _ = _repository(info, tasks_repository).list()
        return [Task.from_document(doc) for doc in items]

    @strawberry.field
    def task(self, info: Info, id: int) -> Optional[Task]:
        doc = _repository(info, tasks_repository).find(id)
        return Task.from_document(doc) if doc else None

    @strawberry.field
    def products(self, info: Info) -> list[Product]:
        items, _ = _repository(info, products_repository).list()
        return [Product.from_document(doc) for doc in items]

    @strawberry.field
    def product(self, info: Info, id: int) -> Optional[Product]:
        doc = _repository(info, products_repository).find(id)
        return Product.from_document(doc) if doc else None

    @strawberry.field
    def baskets(self, info: Info) -> list[Basket]:
        items, _ = _repository(info, baskets_repository).list()
        return [Basket.from_document(doc) for doc in items]

    @strawberry.field
    def basket(self, info: Info, id: int) -> Optional[Basket]:
        doc = _repository(info, baskets_repository).find(id)
        return Basket.from_document(doc) if doc else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    def create_user(self, info: Info, input: UserInput) -> User:
        data = _validated(schemas.UserCreate, input)
        return User.from_document(_repository(info, users_repository).create(data))

    @strawberry.mutation
    def update_user(self, info: Info, id: int, input: UserInput) -> User:
        changes = _validated(schemas.UserUpdate, input, partial=True)
        return User.from_document(
            _repository(info, users_repository).update(id, changes)
        )

    @strawberry.mutation
    def delete_user(self, info: Info, id: int) -> Optional[User]:
        doc = _repository(info, users_repository).delete(id)
        return User.from_document(doc) if doc else None

    @strawberry.mutation
    def create_task(self, info: Info, input: TaskInput) -> Task:
        data = _validated(schemas.TaskCreate, input)
        return Task.from_document(_repository(info, tasks_repository).create(data))

    @strawberry.mutation
    def update_task(self, info: Info, id: int, input: TaskInput) -> Task:
        changes = _validated(schemas.TaskUpdate, input, partial=True)
        return Task.from_document(
            _repository(info, tasks_repository).update(id, changes)
        )

    @strawberry.mutation
    def delete_task(self, info: Info, id: int) -> Optional[Task]:
        doc = _repository(info, tasks_repository).delete(id)
        return Task.from_document(doc) if doc else None

    @strawberry.mutation
    def create_product(self, info: Info, input: ProductInput) -> Product:
        data = _validated(schemas.ProductCreate, input)
        return Product.from_document(
            _repository(info, products_repository).create(data)
        )

    @strawberry.mutation
    def update_product(self, info: Info, id: int, input: ProductInput) -> Product:
        changes = _validated(schemas.ProductUpdate, input, partial=True)
        return Product.from_document(
            _repository(info, products_repository).update(id, changes)
        )

    @strawberry.mutation
    def delete_product(self, info: Info, id: int) -> Optional[Product]:
        doc = _repository(info, products_repository).delete(id)
        return Product.from_document(doc) if doc else None

    @strawberry.mutation
    def create_basket(self, info: Info, input: BasketInput) -> Basket:
        data = _validated(schemas.BasketCreate, input)
        return Basket.from_document(
            _repository(info, baskets_repository).create(data)
        )

    @strawberry.mutation
    def update_basket(self, info: Info, id: int, input: BasketInput) -> Basket:
        changes = _validated(schemas.BasketUpdate, input, partial=True)
        return Basket.from_document(
            _repository(info, baskets_repository).update(id, changes)
        )

    @strawberry.mutation
    def delete_basket(self, info: Info, id: int) -> Optional[Basket]:
        doc = _repository(info, baskets_repository).delete(id)
        return Basket.from_document(doc) if doc else None


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(db: DbClient = Depends(get_db_client)) -> dict:
    return {"db": db}


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
