"""Properties CRUD API routes.

Listings are public. Creating requires the HOST (or ADMIN) role; changing
or removing a listing is limited to its host and admins.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_roles
from app.models.property import Property
from app.models.user import User, UserRole
from app.schemas.auth import MessageResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])

_host_or_admin = require_roles(UserRole.HOST, UserRole.ADMIN)


async def _get_managed_property(property_id: uuid.UUID, user: User, db: AsyncSession) -> Property:
    """Fetch a property the user may modify. 404 when missing or not theirs."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None or (user.role != UserRole.ADMIN and prop.host_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_host_or_admin),
) -> PropertyResponse:
    """Create a property hosted by the authenticated user."""
    data = body.model_dump(exclude={"images"})
    prop = Property(
        host_id=current_user.id,
        images=[str(url) for url in body.images],
        **data,
    )
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties",
)
async def list_properties(
    host_id: uuid.UUID | None = Query(None, description="Only properties of this host"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return a page of properties, newest first."""
    filters = []
    if host_id is not None:
        filters.append(Property.host_id == host_id)

    count_query = select(func.count()).select_from(Property).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = select(Property).where(*filters).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )

    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_host_or_admin),
) -> PropertyResponse:
    """Partially update a property. Only fields set to a value are changed."""
    prop = await _get_managed_property(property_id, current_user, db)

    # Explicit nulls are ignored; every listing column is NOT NULL.
    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    if "images" in update_data:
        update_data["images"] = [str(url) for url in body.images or []]
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_host_or_admin),
) -> MessageResponse:
    """Delete a property and cascade-delete its bookings."""
    prop = await _get_managed_property(property_id, current_user, db)

    await db.delete(prop)
    await db.flush()

    return MessageResponse(message="Property deleted successfully")
