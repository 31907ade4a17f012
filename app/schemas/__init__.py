"""
Pydantic schemas for request/response validation.
"""

# Envelope
from .common import ApiResponse, PaginatedResponse, Pagination, ok

# Authentication and users
from .auth import (
    RegisterRequest,
    LoginRequest,
    AuthPayload,
    ForgotPasswordRequest,
    ResetPasswordRequest
)
from .user import UserResponse

# Listings
from .property import PropertyCreate, PropertyUpdate, PropertyResponse, PropertyImageResponse
from .category import CategoryCreate, CategoryUpdate, CategoryResponse

# Agents and stories
from .agent import (
    AgentCreate,
    AgentUpdate,
    AgentAccountCreate,
    AgentResponse,
    AgentDetailResponse,
    AgentAccountResponse
)
from .story import StoryResponse, StoryGroupResponse

# Content
from .service import ServiceCreate, ServiceUpdate, ServiceResponse
from .contact import ContactCreate, ContactStatusUpdate, ContactResponse, ContactCreated
from .project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    MilestoneIn,
    NewProjectCreate,
    NewProjectUpdate,
    NewProjectResponse,
    NewProjectDetailResponse
)

__all__ = [
    "ApiResponse",
    "PaginatedResponse",
    "Pagination",
    "ok",

    "RegisterRequest",
    "LoginRequest",
    "AuthPayload",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserResponse",

    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyImageResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",

    "AgentCreate",
    "AgentUpdate",
    "AgentAccountCreate",
    "AgentResponse",
    "AgentDetailResponse",
    "AgentAccountResponse",
    "StoryResponse",
    "StoryGroupResponse",

    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "ContactCreate",
    "ContactStatusUpdate",
    "ContactResponse",
    "ContactCreated",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "MilestoneIn",
    "NewProjectCreate",
    "NewProjectUpdate",
    "NewProjectResponse",
    "NewProjectDetailResponse",
]
