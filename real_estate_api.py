from datetime import datetime
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_real_estate_db
from models import Property, User

router = APIRouter()


class ListingType(str, Enum):
    SALE = "sale"
    RENT = "rent"


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    address: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0)
    bedrooms: int = Field(0, ge=0)
    area_sqm: Optional[float] = Field(None, gt=0)
    listing_type: ListingType = ListingType.SALE


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    address: str
    city: str
    price: float
    bedrooms: int
    area_sqm: Optional[float] = None
    listing_type: ListingType
    owner_id: int
    created_at: datetime


def _get_property_or_404(db: Session, property_id: int) -> Property:
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


def _check_can_modify(prop: Property, user: User):
    if prop.owner_id != user.id and user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can modify this property"
        )


@router.get("", response_model=List[PropertyResponse])
def list_properties(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    city: Optional[str] = None,
    listing_type: Optional[ListingType] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    db: Session = Depends(get_real_estate_db),
):
    """List properties with optional filters."""
    query = db.query(Property)

    if city:
        query = query.filter(func.lower(Property.city) == city.lower())
    if listing_type:
        query = query.filter(Property.listing_type == listing_type.value)
    if min_price is not None:
        query = query.filter(Property.price >= min_price)
    if max_price is not None:
        query = query.filter(Property.price <= max_price)

    return query.order_by(Property.id).offset(skip).limit(limit).all()


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(property_id: int, db: Session = Depends(get_real_estate_db)):
    return _get_property_or_404(db, property_id)


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_real_estate_db),
):
    data = payload.model_dump()
    data["listing_type"] = payload.listing_type.value
    prop = Property(**data, owner_id=current_user.id)
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: int,
    payload: PropertyCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_real_estate_db),
):
    prop = _get_property_or_404(db, property_id)
    _check_can_modify(prop, current_user)

    for key, value in payload.model_dump().items():
        setattr(prop, key, value)
    prop.listing_type = payload.listing_type.value
    db.commit()
    db.refresh(prop)
    return prop


@router.delete("/{property_id}")
def delete_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_real_estate_db),
):
    prop = _get_property_or_404(db, property_id)
    _check_can_modify(prop, current_user)

    db.delete(prop)
    db.commit()
    return {"message": "Property deleted successfully"}
