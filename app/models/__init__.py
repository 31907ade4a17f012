"""
Database models for the Real Estate Marketplace API.
"""

from app.models.user import User, UserRole
from app.models.agent import Agent
from app.models.category import Category
from app.models.property import Property, RentPeriod, AreaUnit
from app.models.image import PropertyImage
from app.models.service import Service
from app.models.contact import Contact, ContactStatus
from app.models.project import Project, ProjectStatus, NewProject, NewProjectStatus, ProjectImage, PaymentMilestone
from app.models.story import Story, MediaType
from app.models.password_reset_token import PasswordResetToken

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Agent",
    "Category",
    "Property",
    "RentPeriod",
    "AreaUnit",
    "PropertyImage",
    "Service",
    "Contact",
    "ContactStatus",
    "Project",
    "ProjectStatus",
    "NewProject",
    "NewProjectStatus",
    "ProjectImage",
    "PaymentMilestone",
    "Story",
    "MediaType",
    "PasswordResetToken",
]
