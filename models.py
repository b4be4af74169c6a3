"""ORM models for the two data-access contexts.

Each context owns its own declarative base, so each creates and maps only
its own tables even when both point at the same database.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

UsersBase = declarative_base()
RealEstateBase = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class User(UsersBase):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")  # 'user' or 'admin'
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=_utcnow)


class Property(RealEstateBase):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(300), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    price = Column(Float, nullable=False)
    bedrooms = Column(Integer, nullable=False, default=0)
    area_sqm = Column(Float, nullable=True)
    listing_type = Column(String(10), nullable=False, default="sale")  # 'sale' or 'rent'
    # users live in the other context, so no foreign key here
    owner_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow)
