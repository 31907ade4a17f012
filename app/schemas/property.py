"""
Pydantic schemas for property requests and responses.
Handles property CRUD operations and validation.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from decimal import Decimal
from app.models.property import RentPeriod, AreaUnit
from app.utils.filters import Purpose


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Property listing title",
        examples=["Modern 3BR Villa with Ocean View"]
    )

    type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Property type",
        examples=["villa"]
    )

    purpose: Purpose = Field(
        ...,
        description="Sale or Rent (the labels 'buy' and 'rent' are accepted too)",
        examples=["Sale"]
    )

    price: Decimal = Field(
        ...,
        gt=0,
        description="Asking price or rent",
        examples=[450000]
    )

    currency: str = Field("USD", min_length=3, max_length=10, examples=["USD"])
    rent_period: Optional[RentPeriod] = Field(None, description="Billing period, rentals only")

    beds: Optional[int] = Field(None, ge=0, le=50, examples=[3])
    baths: Optional[int] = Field(None, ge=0, le=50, examples=[2])
    area: Optional[Decimal] = Field(None, gt=0, examples=[220])
    area_unit: AreaUnit = Field(AreaUnit.SQM, examples=["sqm"])

    location: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Street address or neighbourhood",
        examples=["Hodan District"]
    )
    city: Optional[str] = Field(None, max_length=100, examples=["Mogadishu"])
    region: Optional[str] = Field(None, max_length=100, examples=["Banadir"])

    description: Optional[str] = Field(None, max_length=10000)
    amenities: List[str] = Field(default_factory=list, examples=[["Parking", "Garden"]])

    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)

    is_featured: bool = False
    is_published: bool = True
    category_id: Optional[int] = Field(None, ge=1)

    @field_validator('purpose', mode='before')
    @classmethod
    def parse_purpose(cls, v):
        """Accept UI labels as well as wire values."""
        return Purpose.parse(v)

    @field_validator('title', 'location', 'type')
    @classmethod
    def strip_required(cls, v):
        """Strip and require non-blank text."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('amenities')
    @classmethod
    def clean_amenities(cls, v):
        """Drop blank amenity entries."""
        return [item.strip() for item in v if item and item.strip()]

    @model_validator(mode='after')
    def validate_rent_period(self):
        """A rent period only makes sense for rentals."""
        if self.purpose != Purpose.RENT:
            self.rent_period = None
        return self


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    agent_id: Optional[int] = Field(
        None,
        ge=1,
        description="Responsible agent; admins only, agents always list under their own profile"
    )


class PropertyUpdate(BaseModel):
    """Schema for updating an existing property; every field is optional."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    purpose: Optional[Purpose] = None
    price: Optional[Decimal] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    rent_period: Optional[RentPeriod] = None
    beds: Optional[int] = Field(None, ge=0, le=50)
    baths: Optional[int] = Field(None, ge=0, le=50)
    area: Optional[Decimal] = Field(None, gt=0)
    area_unit: Optional[AreaUnit] = None
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=10000)
    amenities: Optional[List[str]] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)
    is_featured: Optional[bool] = None
    is_published: Optional[bool] = None
    category_id: Optional[int] = Field(None, ge=1)
    agent_id: Optional[int] = Field(None, ge=1)

    @field_validator('purpose', mode='before')
    @classmethod
    def parse_purpose(cls, v):
        """Accept UI labels as well as wire values."""
        return Purpose.parse(v) if v is not None else None


class PropertyImageResponse(BaseModel):
    """Stored property image."""

    id: int
    property_id: int
    url: str
    sort_order: int


class PropertyResponse(BaseModel):
    """Property as returned by the API, with agent display fields and image URLs."""

    id: int
    title: str
    slug: str
    type: str
    purpose: Purpose
    price: float
    currency: str
    rent_period: Optional[RentPeriod] = None
    beds: Optional[int] = None
    baths: Optional[int] = None
    area: Optional[float] = None
    area_unit: Optional[AreaUnit] = None
    location: str
    city: Optional[str] = None
    region: Optional[str] = None
    description: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_featured: bool
    is_published: bool
    agent_id: Optional[int] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    agent_name: Optional[str] = None
    agent_phone: Optional[str] = None
    agent_whatsapp: Optional[str] = None
    agent_photo: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    image_records: List[PropertyImageResponse] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
