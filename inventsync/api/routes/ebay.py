import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from inventsync.api.dependencies import (
    get_category_search_use_case,
    get_connection_manager,
    get_listings_use_case,
    get_publish_use_case,
)
from inventsync.api.schemas.ebay_schemas import (
    CategoryResponse,
    ConnectionResponse,
    ConnectRequest,
    ListingResponse,
    ListingSummaryResponse,
    PublishedListingResponse,
    PublishRequest,
)
from inventsync.api.schemas.envelope import ApiResponse, ok
from inventsync.application.use_cases.get_marketplace_listings import GetMarketplaceListings
from inventsync.application.use_cases.marketplace_connection_manager import (
    MarketplaceConnectionManager,
)
from inventsync.application.use_cases.publish_product_listing import (
    PublishProductListing,
    PublishProductListingInput,
)
from inventsync.application.use_cases.search_marketplace_categories import (
    SearchMarketplaceCategories,
)
from inventsync.domain.entities.marketplace_connection import MarketplaceCredentials
from inventsync.domain.enums.listing_status import Marketplace

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/ebay", tags=["ebay"])


@router.get("/connection", response_model=ApiResponse[ConnectionResponse])
async def get_connection(
    manager: MarketplaceConnectionManager = Depends(get_connection_manager),
) -> ApiResponse[ConnectionResponse]:
    connection = await manager.get_connection(Marketplace.EBAY)
    return ok(ConnectionResponse.from_entity(connection) if connection else None)


@router.post(
    "/connect",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ConnectionResponse],
)
async def connect(
    body: ConnectRequest,
    manager: MarketplaceConnectionManager = Depends(get_connection_manager),
) -> ApiResponse[ConnectionResponse]:
    connection = await manager.connect(
        Marketplace.EBAY,
        MarketplaceCredentials(access_token=body.access_token or "", sandbox=body.sandbox),
    )
    return ok(ConnectionResponse.from_entity(connection), message="eBay connected successfully")


@router.post("/disconnect", response_model=ApiResponse[None])
async def disconnect(
    manager: MarketplaceConnectionManager = Depends(get_connection_manager),
) -> ApiResponse[None]:
    await manager.disconnect(Marketplace.EBAY)
    return ok(message="eBay disconnected")


@router.post("/list/{product_id}", response_model=ApiResponse[PublishedListingResponse])
async def publish_product(
    product_id: str,
    body: PublishRequest,
    use_case: PublishProductListing = Depends(get_publish_use_case),
) -> ApiResponse[PublishedListingResponse] | JSONResponse:
    """Run the publish workflow. A failed attempt is still recorded as a listing."""
    output = await use_case.execute(
        PublishProductListingInput(product_id=product_id, category_id=body.category_id or "")
    )
    result = output.result

    if not result.success:
        # Returned rather than raised so the recorded listing row is committed.
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ApiResponse[None](
                success=False,
                error=result.error,
                message="Failed to list product on eBay",
            ).model_dump(),
        )

    return ok(
        PublishedListingResponse(
            listing_id=result.listing_id,
            offer_id=result.offer_id,
            listing_url=result.listing_url,
        ),
        message="Product listed on eBay successfully!",
    )


@router.get("/listings", response_model=ApiResponse[list[ListingSummaryResponse]])
async def list_listings(
    use_case: GetMarketplaceListings = Depends(get_listings_use_case),
) -> ApiResponse[list[ListingSummaryResponse]]:
    summaries = await use_case.all(Marketplace.EBAY)
    return ok([ListingSummaryResponse.from_summary(s) for s in summaries])


@router.get("/listings/{product_id}", response_model=ApiResponse[ListingResponse])
async def get_product_listing(
    product_id: str,
    use_case: GetMarketplaceListings = Depends(get_listings_use_case),
) -> ApiResponse[ListingResponse]:
    listing = await use_case.current_for_product(product_id, Marketplace.EBAY)
    return ok(ListingResponse.from_entity(listing) if listing else None)


@router.get("/categories", response_model=ApiResponse[list[CategoryResponse]])
async def search_categories(
    q: str = Query(default=""),
    use_case: SearchMarketplaceCategories = Depends(get_category_search_use_case),
) -> ApiResponse[list[CategoryResponse]]:
    suggestions = await use_case.execute(q, Marketplace.EBAY)
    return ok([CategoryResponse.from_suggestion(s) for s in suggestions])
