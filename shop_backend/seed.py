"""
Synthetic fixture data for demos and tests.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Callable, Optional

from faker import Faker

from shop_backend.db import DbClient
from shop_backend.repository import BASKETS, COLLECTIONS, PRODUCTS, TASKS, USERS

logger = logging.getLogger(__name__)

ROLES = ("admin", "user", "guest")

# Referenced collections are seeded before the ones pointing at them.
SEED_ORDER = (USERS, PRODUCTS, TASKS, BASKETS)


def _ids(db: DbClient, collection: str) -> list[int]:
    return [doc["id"] for doc in db.list_documents(collection)]


def generate_user(fake: Faker) -> dict:
    first_name = fake.first_name()
    last_name = fake.last_name()
    local_part = re.sub(r"[^a-z0-9.]", "", f"{first_name}.{last_name}".lower())
    return {
        "firstName": first_name,
        "lastName": last_name,
        "age": fake.random_int(min=18, max=80),
        "email": f"{local_part}@{fake.free_email_domain()}",
        "role": fake.random_element(ROLES),
    }


def generate_task(fake: Faker, user_ids: Optional[list[int]] = None) -> dict:
    return {
        "title": fake.sentence(nb_words=4).rstrip("."),
        "description": fake.paragraph(nb_sentences=2),
        "completed": fake.boolean(chance_of_getting_true=30),
        "userId": random.choice(user_ids) if user_ids else None,
    }


def generate_product(fake: Faker) -> dict:
    base_price = round(fake.pyfloat(min_value=1, max_value=500, right_digits=2), 2)
    discount = fake.random_element((0, 0, 0, 10, 20, 25))
    return {
        "sku": fake.unique.ean8(),
        "title": fake.catch_phrase(),
        "desc": fake.paragraph(nb_sentences=3),
        "image": fake.image_url(width=400, height=300),
        "price": round(base_price * (100 - discount) / 100, 2),
        "basePrice": base_price,
        "stocked": fake.boolean(chance_of_getting_true=80),
    }


def generate_basket(
    fake: Faker,
    user_ids: Optional[list[int]] = None,
    product_ids: Optional[list[int]] = None,
) -> dict:
    items = []
    if product_ids:
        count = fake.random_int(min=1, max=min(4, len(product_ids)))
        for product_id in random.sample(product_ids, count):
            items.append({"productId": product_id, "quantity": fake.random_int(1, 5)})
    return {
        "userId": random.choice(user_ids) if user_ids else None,
        "items": items,
    }


def _generator(db: DbClient, collection: str) -> Callable[[Faker], dict]:
    if collection == USERS:
        return generate_user
    if collection == PRODUCTS:
        return generate_product
    if collection == TASKS:
        user_ids = _ids(db, USERS)
        return lambda fake: generate_task(fake, user_ids)
    if collection == BASKETS:
        user_ids = _ids(db, USERS)
        product_ids = _ids(db, PRODUCTS)
        return lambda fake: generate_basket(fake, user_ids, product_ids)
    raise ValueError(f"Unknown collection '{collection}'")


def seed_collection(
    db: DbClient, collection: str, count: int, fake: Optional[Faker] = None
) -> list[dict]:
    """
    Generate and insert ``count`` documents. Ids continue after the current
    maximum, so an empty collection starts at 1000.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    fake = fake or Faker()
    generate = _generator(db, collection)
    documents = db.insert_documents(collection, [generate(fake) for _ in range(count)])
    logger.info("Seeded %d %s", len(documents), collection)
    return documents


def seed_users(db: DbClient, count: int) -> list[dict]:
    return seed_collection(db, USERS, count)


def seed_tasks(db: DbClient, count: int) -> list[dict]:
    return seed_collection(db, TASKS, count)


def seed_products(db: DbClient, count: int) -> list[dict]:
    return seed_collection(db, PRODUCTS, count)


def seed_baskets(db: DbClient, count: int) -> list[dict]:
    return seed_collection(db, BASKETS, count)


def reset_all(db: DbClient, counts: dict[str, int]) -> dict[str, int]:
    """Drop every collection and regenerate it with the given counts."""
    db.drop_all()
    fake = Faker()
    seeded = {}
    for collection in SEED_ORDER:
        seeded[collection] = len(
            seed_collection(db, collection, counts.get(collection, 0), fake)
        )
    logger.info("Reset all collections: %s", seeded)
    return seeded


def is_empty(db: DbClient) -> bool:
    return all(db.count_documents(collection) == 0 for collection in COLLECTIONS)
