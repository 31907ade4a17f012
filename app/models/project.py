"""
Developer project models.

``Project`` backs the simple projects listing. ``NewProject`` backs the
off-plan catalogue with its gallery and payment plan milestones.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base, enum_type
from decimal import Decimal
import enum
from typing import List, Optional


class ProjectStatus(str, enum.Enum):
    """Lifecycle of a listed project."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class NewProjectStatus(str, enum.Enum):
    """Construction state of an off-plan project."""
    UNDER_CONSTRUCTION = "Under Construction"
    READY = "Ready"


class Project(Base):
    """Project shown on the projects page."""

    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price_from: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    developer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        enum_type(ProjectStatus, 16),
        nullable=False,
        default=ProjectStatus.UPCOMING,
        index=True
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "price_from": float(self.price_from) if self.price_from is not None else None,
            "developer": self.developer,
            "description": self.description,
            "image": self.image,
            "status": self.status.value,
            "is_featured": self.is_featured,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class NewProject(Base):
    """Off-plan or ready development with gallery and payment plan."""

    __tablename__ = "new_projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    developer: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[NewProjectStatus] = mapped_column(
        enum_type(NewProjectStatus, 32),
        nullable=False,
        default=NewProjectStatus.UNDER_CONSTRUCTION,
        index=True
    )
    handover: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="e.g. Q4 2026")
    launch_price: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_plan_label: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, comment="e.g. 60/40")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    beds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    baths: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completion_percent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    images: Mapped[List["ProjectImage"]] = relationship(
        "ProjectImage",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProjectImage.sort_order.asc(), ProjectImage.id.asc()"
    )

    milestones: Mapped[List["PaymentMilestone"]] = relationship(
        "PaymentMilestone",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PaymentMilestone.sort_order.asc(), PaymentMilestone.id.asc()"
    )

    @property
    def tags(self) -> List[str]:
        """Ready projects are tagged Ready; everything else is Off-Plan."""
        return ["Ready"] if self.status == NewProjectStatus.READY else ["Off-Plan"]

    def to_dict(self, include_details: bool = False) -> dict:
        """
        Convert project to dictionary.

        Args:
            include_details: Include every image and the payment plan; otherwise only the cover image

        Returns:
            Dictionary representation of the project
        """
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "developer": self.developer,
            "location": self.location,
            "status": self.status.value,
            "handover": self.handover,
            "launch_price": self.launch_price,
            "payment_plan_label": self.payment_plan_label,
            "description": self.description,
            "category": self.category,
            "beds": self.beds,
            "baths": self.baths,
            "completion_percent": self.completion_percent,
            "is_published": self.is_published,
            "tags": self.tags,
            "cover_image": self.images[0].url if self.images else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_details:
            data["images"] = [image.to_dict() for image in self.images]
            data["payment_plan"] = [milestone.to_dict() for milestone in self.milestones]
        return data


class ProjectImage(Base):
    """Gallery image of a new project."""

    __tablename__ = "project_images"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("new_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    project: Mapped["NewProject"] = relationship("NewProject", back_populates="images")

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "sort_order": self.sort_order}


class PaymentMilestone(Base):
    """One step of a project's payment plan (e.g. 20% on booking)."""

    __tablename__ = "project_payment_milestones"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("new_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    percent: Mapped[Decimal] = mapped_column(Numeric(precision=5, scale=2), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    project: Mapped["NewProject"] = relationship("NewProject", back_populates="milestones")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "percent": float(self.percent),
            "note": self.note,
            "sort_order": self.sort_order,
        }
