"""
HTTP routes for the shop backend API.

Route handlers are generated per resource by ``_add_crud_routes``; the
annotations inside it refer to local schema classes, so this module keeps
eager annotation evaluation.
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from shop_backend.config import get_settings
from shop_backend.db import DbClient
from shop_backend.dependencies import (
    get_baskets,
    get_db_client,
    get_products,
    get_tasks,
    get_users,
)
from shop_backend.docs import render_markdown_file
from shop_backend.errors import NotFoundError, ValidationError
from shop_backend.repository import BasketRepository, Repository
from shop_backend.schemas import (
    BasketCreate,
    BasketItem,
    BasketResponse,
    BasketUpdate,
    ErrorResponse,
    ListResponse,
    MessageResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from shop_backend.seed import reset_all

logger = logging.getLogger(__name__)

router = APIRouter()
pages_router = APIRouter()

DEFAULT_PAGE_SIZE = 100

NOT_FOUND = {404: {"model": ErrorResponse}}

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def parse_body(schema: type[BaseModel]) -> Callable:
    """
    Dependency validating a JSON or form-encoded request body against ``schema``.
    """

    async def dependency(request: Request) -> BaseModel:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(FORM_CONTENT_TYPES):
            data = dict(await request.form())
        else:
            try:
                data = await request.json()
            except ValueError:
                raise ValidationError("Request body must be JSON or form encoded")
        try:
            return schema.model_validate(data)
        except SchemaValidationError as exc:
            raise RequestValidationError(exc.errors())

    return dependency


def _add_crud_routes(
    resource: str,
    get_repository: Callable[..., Repository],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
) -> None:
    path = f"/{resource}"
    item_path = f"/{resource}/{{doc_id}}"

    @router.get(
        path,
        response_model=ListResponse[response_schema],
        name=f"list_{resource}",
        tags=[resource],
    )
    def list_documents(
        page: int = Query(1, ge=1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=1000, alias="pageSize"),
        sort: Optional[str] = Query(None, description="Field name, '-' prefix for descending"),
        repository: Repository = Depends(get_repository),
    ):
        items, total = repository.list(page=page, page_size=page_size, sort=sort)
        return {"total": total, "items": items}

    @router.get(
        item_path,
        response_model=response_schema,
        name=f"get_{resource}",
        tags=[resource],
        responses=NOT_FOUND,
    )
    def get_document(
        doc_id: int = Path(...),
        repository: Repository = Depends(get_repository),
    ):
        return repository.get(doc_id)

    @router.post(
        path,
        response_model=response_schema,
        status_code=201,
        name=f"create_{resource}",
        tags=[resource],
    )
    def create_document(
        payload: BaseModel = Depends(parse_body(create_schema)),
        repository: Repository = Depends(get_repository),
    ):
        return repository.create(payload.model_dump())

    @router.put(
        item_path,
        response_model=response_schema,
        name=f"update_{resource}",
        tags=[resource],
        responses=NOT_FOUND,
    )
    def update_document(
        payload: BaseModel = Depends(parse_body(update_schema)),
        doc_id: int = Path(...),
        repository: Repository = Depends(get_repository),
    ):
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        return repository.update(doc_id, changes)

    @router.delete(
        item_path,
        response_model=response_schema,
        name=f"delete_{resource}",
        tags=[resource],
        responses={204: {"description": "No document with this id"}},
    )
    def delete_document(
        doc_id: int = Path(...),
        repository: Repository = Depends(get_repository),
    ):
        document = repository.delete(doc_id)
        if document is None:
            return Response(status_code=204)
        return document


_add_crud_routes("users", get_users, UserCreate, UserUpdate, UserResponse)
_add_crud_routes("tasks", get_tasks, TaskCreate, TaskUpdate, TaskResponse)
_add_crud_routes(
    "products", get_products, ProductCreate, ProductUpdate, ProductResponse
)
_add_crud_routes("baskets", get_baskets, BasketCreate, BasketUpdate, BasketResponse)


@router.post("/baskets/{doc_id}/items", response_model=BasketResponse, tags=["baskets"])
def add_basket_item(
    payload: BasketItem = Depends(parse_body(BasketItem)),
    doc_id: int = Path(...),
    baskets: BasketRepository = Depends(get_baskets),
):
    return baskets.add_item(doc_id, payload.productId, payload.quantity)


@router.delete(
    "/baskets/{doc_id}/items/{product_id}",
    response_model=BasketResponse,
    tags=["baskets"],
)
def remove_basket_item(
    doc_id: int = Path(...),
    product_id: int = Path(...),
    baskets: BasketRepository = Depends(get_baskets),
):
    return baskets.remove_item(doc_id, product_id)


@router.delete("/system", response_model=MessageResponse, tags=["system"])
def reset_system(db: DbClient = Depends(get_db_client)):
    """
    Drop every collection and regenerate the seed data.
    """
    seeded = reset_all(db, get_settings().seed_counts())
    logger.info("System reset requested, seeded %s", seeded)
    return MessageResponse(code=200, message="All the data is reset")


@pages_router.get("/", response_class=HTMLResponse, include_in_schema=False)
def landing_page():
    settings = get_settings()
    try:
        return render_markdown_file(settings.docs_path, title="Shop API")
    except FileNotFoundError:
        raise NotFoundError(f"Documentation file '{settings.docs_path}' not found")
