from fastapi import APIRouter, Depends, status

from inventsync.api.dependencies import get_product_repo
from inventsync.api.schemas.envelope import ApiResponse, ok
from inventsync.api.schemas.product_schemas import ProductRequest, ProductResponse
from inventsync.application.interfaces.product_repository import ProductRepository
from inventsync.domain.errors import NotFoundError

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ApiResponse[list[ProductResponse]])
async def list_products(
    repo: ProductRepository = Depends(get_product_repo),
) -> ApiResponse[list[ProductResponse]]:
    products = await repo.list_all()
    return ok([ProductResponse.from_entity(p) for p in products])


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(
    product_id: str,
    repo: ProductRepository = Depends(get_product_repo),
) -> ApiResponse[ProductResponse]:
    product = await repo.get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return ok(ProductResponse.from_entity(product))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProductResponse],
)
async def create_product(
    body: ProductRequest,
    repo: ProductRepository = Depends(get_product_repo),
) -> ApiResponse[ProductResponse]:
    product = await repo.create(body.to_fields())
    return ok(ProductResponse.from_entity(product))


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: str,
    body: ProductRequest,
    repo: ProductRepository = Depends(get_product_repo),
) -> ApiResponse[ProductResponse]:
    product = await repo.update(product_id, body.to_fields())
    return ok(ProductResponse.from_entity(product))


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: str,
    repo: ProductRepository = Depends(get_product_repo),
) -> ApiResponse[None]:
    await repo.delete(product_id)
    return ok(message="Product deleted")
