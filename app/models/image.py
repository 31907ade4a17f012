"""
PropertyImage model for property photo galleries.
"""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.property import Property


class PropertyImage(Base):
    """Image attached to a property; ordered by sort_order."""

    __tablename__ = "property_images"

    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Public URL or /uploads path of the image"
    )

    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    property_rel: Mapped["Property"] = relationship("Property", back_populates="images")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "url": self.url,
            "sort_order": self.sort_order,
        }
