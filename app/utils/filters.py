"""
Listing filter models and query-parameter composition.
Centralizes the purpose mapping between UI labels and wire values.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar
from urllib.parse import urlencode
from decimal import Decimal
import enum


class Purpose(str, enum.Enum):
    """Listing intent. Values are the wire representation stored and sent over HTTP."""
    SALE = "Sale"
    RENT = "Rent"

    @property
    def label(self) -> str:
        """UI label used by search tabs ("buy" or "rent")."""
        return _PURPOSE_LABELS[self]

    @property
    def display_name(self) -> str:
        """Human readable name shown on listing cards."""
        return "Buy" if self is Purpose.SALE else "Rent"

    @classmethod
    def parse(cls, value: Any) -> "Purpose":
        """
        Parse a purpose from either its UI label or its wire value.

        Args:
            value: "buy", "rent", "Sale", "Rent" (case-insensitive) or a Purpose

        Returns:
            Matching Purpose member

        Raises:
            ValueError: If the value is not a known purpose
        """
        if isinstance(value, cls):
            return value

        key = str(value or "").strip().lower()
        for member, label in _PURPOSE_LABELS.items():
            if key in (label, member.value.lower()):
                return member

        raise ValueError(f"Invalid purpose: {value}. Must be one of: buy, rent, Sale, Rent")


_PURPOSE_LABELS = {
    Purpose.SALE: "buy",
    Purpose.RENT: "rent",
}

DEFAULT_PURPOSE = Purpose.SALE


class ListingFilters(BaseModel):
    """Base class for filter models; fields are encoded in declaration order."""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings as absent filters."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class PropertyFilters(ListingFilters):
    """Property search state as built by the search panel and read by the listing endpoint."""

    purpose: Optional[Purpose] = Field(DEFAULT_PURPOSE, alias="purpose")
    location: Optional[str] = Field(None, alias="location")
    property_type: Optional[str] = Field(None, alias="type")
    min_beds: Optional[int] = Field(None, ge=0, alias="beds")
    max_beds: Optional[int] = Field(None, ge=0, alias="maxBeds")
    min_baths: Optional[int] = Field(None, ge=0, alias="baths")
    max_baths: Optional[int] = Field(None, ge=0, alias="maxBaths")
    min_price: Optional[Decimal] = Field(None, ge=0, alias="minPrice")
    max_price: Optional[Decimal] = Field(None, ge=0, alias="maxPrice")
    city: Optional[str] = Field(None, alias="city")

    @field_validator("purpose", mode="before")
    @classmethod
    def parse_purpose(cls, v):
        """Accept UI labels as well as wire values."""
        if v is None or v == "":
            return None
        return Purpose.parse(v)


class AgentFilters(ListingFilters):
    """Find-my-agent filters."""

    city: Optional[str] = Field(None, alias="city")
    language: Optional[str] = Field(None, alias="language")
    name: Optional[str] = Field(None, alias="name")
    specialization: Optional[str] = Field(None, alias="specialization")


class NewProjectFilters(ListingFilters):
    """Off-plan project filters."""

    location: Optional[str] = Field(None, alias="location")
    status: Optional[str] = Field(None, alias="status")
    category: Optional[str] = Field(None, alias="category")
    min_beds: Optional[int] = Field(None, ge=0, alias="beds")
    handover: Optional[str] = Field(None, alias="handover")
    payment_plan: Optional[str] = Field(None, alias="paymentPlan")
    min_completion: Optional[int] = Field(None, ge=0, le=100, alias="completion")


FiltersType = TypeVar("FiltersType", bound=ListingFilters)


def build_query_params(filters: ListingFilters) -> List[Tuple[str, str]]:
    """
    Encode a filter model as ordered query parameters.

    Fields that are None or blank are omitted entirely. Defaults are
    emitted, so a fresh PropertyFilters always carries its purpose.

    Args:
        filters: Filter model instance

    Returns:
        List of (wire key, value) pairs in field declaration order
    """
    params = []
    for name, field in type(filters).model_fields.items():
        value = getattr(filters, name)
        if value is None:
            continue
        if isinstance(value, enum.Enum):
            value = value.value
        elif isinstance(value, bool):
            value = "true" if value else "false"
        value = str(value).strip()
        if not value:
            continue
        params.append((field.alias or name, value))
    return params


def parse_query_params(model: Type[FiltersType], params: Mapping[str, Any]) -> FiltersType:
    """
    Decode query parameters into a filter model.

    A key missing from the parameters means that filter is off, even when the
    model declares a default for it. This matches how the listing endpoints
    read an absent parameter.

    Args:
        model: Filter model class
        params: Mapping of wire keys to values (e.g. request.query_params)

    Returns:
        Filter model instance

    Raises:
        pydantic.ValidationError: If a value cannot be converted
    """
    data = {field.alias or name: None for name, field in model.model_fields.items()}
    data.update({key: value for key, value in params.items() if key in data})
    return model.model_validate(data)


def to_query_string(filters: ListingFilters) -> str:
    """Encode a filter model as a URL query string."""
    return urlencode(build_query_params(filters))
