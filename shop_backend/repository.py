"""
Collection repositories shared by the REST routes and the GraphQL resolvers.
"""

from __future__ import annotations

import logging
from typing import Optional

from shop_backend.db import DbClient
from shop_backend.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

USERS = "users"
TASKS = "tasks"
PRODUCTS = "products"
BASKETS = "baskets"

COLLECTIONS = (USERS, TASKS, PRODUCTS, BASKETS)

# Scalar fields a list can be ordered by.
USER_SORT_FIELDS = ("id", "firstName", "lastName", "age", "email", "role")
TASK_SORT_FIELDS = ("id", "title", "completed", "userId")
PRODUCT_SORT_FIELDS = ("id", "sku", "title", "price", "basePrice", "stocked")
BASKET_SORT_FIELDS = ("id", "userId")


def parse_sort(
    sort: Optional[str], sortable: tuple[str, ...] = ("id",)
) -> tuple[str, bool]:
    """Split ``-field`` / ``field`` into ``(field, descending)``."""
    if not sort:
        return "id", False
    if sort.startswith("-"):
        field, descending = sort[1:], True
    else:
        field, descending = sort.lstrip("+"), False
    if field not in sortable:
        raise ValidationError(
            f"Cannot sort on '{field}', expected one of: {', '.join(sortable)}"
        )
    return field, descending


class Repository:
    """CRUD access to one collection, keyed by the numeric document id."""

    def __init__(
        self,
        db: DbClient,
        collection: str,
        label: str,
        sortable: tuple[str, ...] = ("id",),
    ):
        self.db = db
        self.collection = collection
        self.label = label
        self.sortable = sortable

    def not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} not found")

    def list(
        self,
        *,
        page: int = 1,
        page_size: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> tuple[list[dict], int]:
        field, descending = parse_sort(sort, self.sortable)
        offset = (page - 1) * page_size if page_size else 0
        items = self.db.list_documents(
            self.collection,
            sort=field,
            descending=descending,
            offset=offset,
            limit=page_size,
        )
        return items, self.db.count_documents(self.collection)

    def find(self, doc_id: int) -> Optional[dict]:
        return self.db.get_document(self.collection, doc_id)

    def get(self, doc_id: int) -> dict:
        document = self.find(doc_id)
        if document is None:
            raise self.not_found()
        return document

    def create(self, data: dict) -> dict:
        document = self.db.insert_document(self.collection, data)
        logger.info("Created %s %s", self.collection, document["id"])
        return document

    def update(self, doc_id: int, changes: dict) -> dict:
        document = self.db.update_document(self.collection, doc_id, changes)
        if document is None:
            raise self.not_found()
        return document

    def delete(self, doc_id: int) -> Optional[dict]:
        document = self.db.delete_document(self.collection, doc_id)
        if document is not None:
            logger.info("Deleted %s %s", self.collection, doc_id)
        return document


class BasketRepository(Repository):
    """Baskets additionally check that every line references a known product."""

    def __init__(self, db: DbClient):
        super().__init__(db, BASKETS, "Basket", BASKET_SORT_FIELDS)

    def _check_products(self, items: list[dict]) -> None:
        for item in items:
            if self.db.get_document(PRODUCTS, item["productId"]) is None:
                raise ValidationError(f"Product {item['productId']} does not exist")

    def create(self, data: dict) -> dict:
        self._check_products(data.get("items") or [])
        return super().create(data)

    def update(self, doc_id: int, changes: dict) -> dict:
        if changes.get("items") is not None:
            self._check_products(changes["items"])
        return super().update(doc_id, changes)

    def add_item(self, doc_id: int, product_id: int, quantity: int = 1) -> dict:
        basket = self.get(doc_id)
        self._check_products([{"productId": product_id}])
        items = list(basket.get("items") or [])
        for item in items:
            if item["productId"] == product_id:
                item["quantity"] += quantity
                break
        else:
            items.append({"productId": product_id, "quantity": quantity})
        return super().update(doc_id, {"items": items})

    def remove_item(self, doc_id: int, product_id: int) -> dict:
        basket = self.get(doc_id)
        items = list(basket.get("items") or [])
        remaining = [item for item in items if item["productId"] != product_id]
        if len(remaining) == len(items):
            raise NotFoundError(f"Product {product_id} not found in basket")
        return super().update(doc_id, {"items": remaining})


def users_repository(db: DbClient) -> Repository:
    return Repository(db, USERS, "User", USER_SORT_FIELDS)


def tasks_repository(db: DbClient) -> Repository:
    return Repository(db, TASKS, "Task", TASK_SORT_FIELDS)


def products_repository(db: DbClient) -> Repository:
    return Repository(db, PRODUCTS, "Product", PRODUCT_SORT_FIELDS)


def baskets_repository(db: DbClient) -> BasketRepository:
    return BasketRepository(db)
