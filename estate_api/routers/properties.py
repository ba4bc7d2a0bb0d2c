"""
Property management API endpoints for CRUD operations and filtered search.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional

from estate_api.models.user import User
from estate_api.services.property import PropertyService
from estate_api.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyListResponse,
    PropertyDetailResponse,
    PropertyCreatedResponse,
    PropertyUpdatedResponse,
    MessageResponse
)
from estate_api.utils.dependencies import (
    get_current_agent_user,
    get_property_service
)
from estate_api.utils.filters import build_search_filters
from estate_api.schemas.error import get_crud_error_responses, get_error_responses


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search properties",
    description="List properties matching every supplied filter, newest first",
    responses=get_error_responses(400, 500)
)
async def list_properties(
    property_type: Optional[str] = Query(None, description="Property type (house, apartment, condo, ...)"),
    listing_type: Optional[str] = Query(None, description="Listing type (sale/rent)"),
    city: Optional[str] = Query(None, description="Case-insensitive partial city match"),
    min_price: Optional[str] = Query(None, description="Minimum price (inclusive)"),
    max_price: Optional[str] = Query(None, description="Maximum price (inclusive)"),
    price_range: Optional[str] = Query(None, description="Price range shorthand, e.g. 0-500000 or 2000000+"),
    status_filter: Optional[str] = Query(None, alias="status", description="Listing status"),
    bedrooms: Optional[str] = Query(None, description="Minimum number of bedrooms"),
    bathrooms: Optional[str] = Query(None, description="Minimum number of bathrooms"),
    featured: Optional[str] = Query(None, description="'true' for featured listings only"),
    agent_id: Optional[str] = Query(None, description="Only listings of this agent"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search property listings.

    Filter values are taken as the filter form sends them; empty values are
    ignored. Explicit min_price/max_price override the bounds of price_range.

    Returns:
        Matching properties, each with its ordered image ids
    """
    filters = build_search_filters(
        property_type=property_type,
        listing_type=listing_type,
        city=city,
        min_price=min_price,
        max_price=max_price,
        price_range=price_range,
        status=status_filter,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        featured=featured,
        agent_id=agent_id
    )

    properties = await property_service.search_properties(filters)
    return PropertyListResponse(properties=properties)


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property by ID",
    responses=get_error_responses(400, 404)
)
async def get_property(
    property_id: int = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    """
    Get a single property with its image ids, primary image first.

    Raises:
        PropertyNotFoundError: If property doesn't exist
    """
    property_dict = await property_service.get_property(property_id)
    return PropertyDetailResponse(property=property_dict)


@router.post(
    "",
    response_model=PropertyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a new property listing. Requires agent or admin role.",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyCreatedResponse:
    """
    Create a new property listing owned by the caller.

    Pre-uploaded images listed in ``images`` are linked in the same
    transaction; the first one becomes the primary image.

    Raises:
        InsufficientPermissionsError: If user is neither agent nor admin
        ValidationError: If property data is invalid
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyCreatedResponse(property_id=property_obj.id)


@router.put(
    "/{property_id}",
    response_model=PropertyUpdatedResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Partially update a property. Agents may only update their own listings.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyUpdatedResponse:
    """
    Update a property listing.

    Only fields present in the body change. Supplying ``images`` replaces the
    image set atomically with the field update.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If an agent does not own the property
    """
    await property_service.update_property(property_id, property_data, current_user)
    property_dict = await property_service.get_property(property_id)
    return PropertyUpdatedResponse(property=property_dict)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete property",
    description="Delete a property, its favorites, and unlink its images.",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> MessageResponse:
    await property_service.delete_property(property_id, current_user)
    return MessageResponse(message="Property deleted successfully")
