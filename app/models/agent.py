"""
Agent profile model.
Agents are the public faces behind listings and stories; a profile may be linked to a user account.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


def is_local_file_path(path: Optional[str]) -> bool:
    """Check for Windows absolute paths and file:// URLs, which can't be served."""
    if not path:
        return False
    value = path.strip()
    return ":\\" in value or value.lower().startswith("file://")


class Agent(Base):
    """Agent profile shown in the directory, on listings and in the stories row."""

    __tablename__ = "agents"

    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
        index=True,
        comment="Linked user account"
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    specialty: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    specialization: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    rating: Mapped[Decimal] = mapped_column(
        Numeric(precision=3, scale=2),
        nullable=False,
        default=Decimal("0"),
        index=True
    )
    reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Number of reviews")
    sales: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    languages: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Comma-separated list of spoken languages"
    )

    profile_photo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, comment="Legacy photo field")

    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    company: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    whatsapp: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    is_trubroker: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Display badge for vetted agents"
    )

    user: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="agent",
        lazy="selectin"
    )

    @property
    def photo(self) -> Optional[str]:
        """Display photo: profile_photo takes priority over the legacy image field."""
        for candidate in (self.profile_photo, self.image):
            if candidate and candidate.strip() and not is_local_file_path(candidate):
                return candidate.strip()
        return None

    @property
    def language_list(self) -> List[str]:
        """Spoken languages as a list."""
        if not self.languages:
            return []
        return [lang.strip() for lang in self.languages.split(",") if lang.strip()]

    def to_dict(self, properties_count: Optional[int] = None) -> dict:
        """
        Convert agent to dictionary.

        Args:
            properties_count: Optional number of listings to include

        Returns:
            Dictionary representation of the agent
        """
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "title": self.title,
            "specialty": self.specialty,
            "specialization": self.specialization,
            "bio": self.bio,
            "experience": self.experience,
            "rating": float(self.rating) if self.rating is not None else 0.0,
            "reviews": self.reviews,
            "sales": self.sales,
            "languages": self.languages,
            "profile_photo": self.profile_photo,
            "image": self.image,
            "photo": self.photo,
            "city": self.city,
            "company": self.company,
            "phone": self.phone,
            "whatsapp": self.whatsapp,
            "is_trubroker": self.is_trubroker,
            "email": self.user.email if self.user else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if properties_count is not None:
            data["properties_count"] = properties_count
        return data
