"""
Property model for rental and sale listings.
Handles property data with location, pricing, publishing state and relationship management.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, JSON, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base, enum_type
from app.utils.filters import Purpose
from decimal import Decimal
import enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.agent import Agent
    from app.models.category import Category
    from app.models.image import PropertyImage


class RentPeriod(str, enum.Enum):
    """Billing period for rental listings."""
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class AreaUnit(str, enum.Enum):
    """Unit of the area figure."""
    SQM = "sqm"
    SQFT = "sqft"


class Property(Base):
    """
    Property model for managing rental and sale listings.
    Visibility is controlled by is_published; featured listings sort first.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Property listing title"
    )

    slug: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        unique=True,
        index=True,
        comment="URL identifier derived from the title"
    )

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Property type (apartment, villa, land, ...)"
    )

    purpose: Mapped[Purpose] = mapped_column(
        enum_type(Purpose, 8),
        nullable=False,
        index=True,
        comment="Sale or Rent"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True
    )

    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="USD")

    rent_period: Mapped[Optional[RentPeriod]] = mapped_column(
        enum_type(RentPeriod, 16),
        nullable=True,
        comment="Only set for rentals"
    )

    beds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    baths: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    area: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=2), nullable=True)
    area_unit: Mapped[AreaUnit] = mapped_column(enum_type(AreaUnit, 8), nullable=False, default=AreaUnit.SQM)

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Street address or neighbourhood"
    )
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amenities: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    latitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=7), nullable=True)
    longitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=7), nullable=True)

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    agent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("agents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Agent responsible for the listing"
    )

    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Relationships
    agent: Mapped[Optional["Agent"]] = relationship("Agent", lazy="selectin")
    category: Mapped[Optional["Category"]] = relationship("Category", lazy="selectin")

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyImage.sort_order.asc(), PropertyImage.id.asc()"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, slug={self.slug}, price={self.price})>"

    @property
    def image_urls(self) -> List[str]:
        """Image URLs in display order."""
        return [image.url for image in self.images]

    def validate_price(self) -> None:
        """
        Validate property price.

        Raises:
            ValueError: If price is invalid
        """
        if self.price is None or self.price <= 0:
            raise ValueError("Property price must be greater than 0")

        if self.price > Decimal('9999999999.99'):
            raise ValueError("Property price exceeds maximum allowed value")

    def validate_rooms(self) -> None:
        """
        Validate bedroom and bathroom counts.

        Raises:
            ValueError: If a count is negative
        """
        for label, value in (("bedrooms", self.beds), ("bathrooms", self.baths)):
            if value is not None and value < 0:
                raise ValueError(f"Number of {label} cannot be negative")

    def validate_coordinates(self) -> None:
        """
        Validate latitude and longitude coordinates.

        Raises:
            ValueError: If coordinates are invalid
        """
        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90 degrees")

        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180 degrees")

    def validate_all(self) -> None:
        """
        Run all validation checks on the property.

        Raises:
            ValueError: If any validation fails
        """
        self.validate_price()
        self.validate_rooms()
        self.validate_coordinates()

    def to_dict(self, include_agent: bool = True, include_images: bool = True) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_agent: Whether to include the agent's display fields
            include_images: Whether to include image URLs

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "type": self.type,
            "purpose": self.purpose.value,
            "price": float(self.price),
            "currency": self.currency,
            "rent_period": self.rent_period.value if self.rent_period else None,
            "beds": self.beds,
            "baths": self.baths,
            "area": float(self.area) if self.area is not None else None,
            "area_unit": self.area_unit.value if self.area_unit else None,
            "location": self.location,
            "city": self.city,
            "region": self.region,
            "description": self.description,
            "amenities": list(self.amenities or []),
            "latitude": float(self.latitude) if self.latitude is not None else None,
            "longitude": float(self.longitude) if self.longitude is not None else None,
            "is_featured": self.is_featured,
            "is_published": self.is_published,
            "agent_id": self.agent_id,
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_agent:
            agent = self.agent
            result["agent_name"] = agent.name if agent else None
            result["agent_phone"] = agent.phone if agent else None
            result["agent_whatsapp"] = agent.whatsapp if agent else None
            result["agent_photo"] = agent.photo if agent else None

        if include_images:
            result["images"] = self.image_urls
            result["image_records"] = [image.to_dict() for image in self.images]

        return result


# Composite index for the public listing: published first by featured flag and recency
published_featured_index = Index(
    'idx_properties_published_featured',
    Property.is_published,
    Property.is_featured,
    Property.created_at
)

# Composite index for purpose filtering with price
purpose_price_index = Index(
    'idx_properties_purpose_price',
    Property.purpose,
    Property.price
)
