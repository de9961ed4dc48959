"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends

from shop_backend.config import get_settings
from shop_backend.db import DbClient, InMemoryDbClient, SqlDbClient
from shop_backend.repository import (
    BasketRepository,
    Repository,
    baskets_repository,
    products_repository,
    tasks_repository,
    users_repository,
)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so documents persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_users(db: DbClient = Depends(get_db_client)) -> Repository:
    return users_repository(db)


def get_tasks(db: DbClient = Depends(get_db_client)) -> Repository:
    return tasks_repository(db)


def get_products(db: DbClient = Depends(get_db_client)) -> Repository:
    return products_repository(db)


def get_baskets(db: DbClient = Depends(get_db_client)) -> BasketRepository:
    return baskets_repository(db)
