"""
Contact form submission model.
"""

from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base, enum_type
import enum
from typing import Optional


class ContactStatus(str, enum.Enum):
    """Follow-up state of a contact request."""
    NEW = "new"
    CONTACTED = "contacted"
    CLOSED = "closed"


class Contact(Base):
    """Inquiry sent through the contact form, optionally about a property."""

    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(191), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    property_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    status: Mapped[ContactStatus] = mapped_column(
        enum_type(ContactStatus, 16),
        nullable=False,
        default=ContactStatus.NEW,
        index=True
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "property_id": self.property_id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
