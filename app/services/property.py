"""
Property service for managing property listings with business logic validation.
Handles CRUD operations, ownership validation, visibility rules, search and images.
"""

from typing import Optional, List, Dict, Any, Tuple, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from app.config import settings
from app.repositories.property import PropertyRepository
from app.repositories.agent import AgentRepository
from app.repositories.category import CategoryRepository
from app.models.property import Property
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.utils.filters import Purpose, PropertyFilters
from app.utils.file_utils import FileValidator, FileStorage
from app.utils.slug import slugify, unique_slug
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    OwnershipError,
    AgentProfileRequiredError,
    ResourceLimitExceededError,
    InsufficientPermissionsError
)
import logging

if TYPE_CHECKING:
    from app.utils.dependencies import Session

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for managing property listings with comprehensive business logic.
    Handles CRUD operations, ownership validation, search functionality, and business rules.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.agent_repo = AgentRepository(db_session)
        self.category_repo = CategoryRepository(db_session)
        self.storage = storage

    # Permissions

    @staticmethod
    def _viewer(session: Optional["Session"]) -> Tuple[bool, Optional[int]]:
        """Visibility inputs for a caller: (is_admin, agent_id)."""
        if not session:
            return False, None
        return session.is_admin, session.agent_id

    @staticmethod
    def _can_view(property_obj: Property, session: Optional["Session"]) -> bool:
        if property_obj.is_published:
            return True
        if not session:
            return False
        return session.is_admin or (
            session.agent_id is not None and property_obj.agent_id == session.agent_id
        )

    @staticmethod
    def _check_can_manage(property_obj: Property, session: "Session") -> None:
        """
        Admins manage every listing, agents only their own.

        Raises:
            OwnershipError: If an agent targets another agent's listing
        """
        if session.is_admin:
            return
        if session.agent_id is None or property_obj.agent_id != session.agent_id:
            raise OwnershipError("properties")

    # Reads

    async def list_properties(
        self,
        filters: PropertyFilters,
        session: Optional["Session"] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Public listing: filters, role-based visibility, featured first.

        Returns:
            Tuple of (property dictionaries, total count)
        """
        is_admin, agent_id = self._viewer(session)
        properties, total = await self.property_repo.search_properties(
            filters,
            skip=(page - 1) * limit,
            limit=limit,
            is_admin=is_admin,
            viewer_agent_id=agent_id
        )
        return [p.to_dict() for p in properties], total

    async def list_featured(self, limit: int = 6) -> List[Dict[str, Any]]:
        """Published featured listings that have an agent."""
        return [p.to_dict() for p in await self.property_repo.get_featured(limit)]

    async def list_agent_properties(
        self,
        agent_id: int,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        An agent's published listings, newest first.

        Raises:
            NotFoundError: If the agent doesn't exist
        """
        if not await self.agent_repo.get_by_id(agent_id):
            raise NotFoundError("Agent", agent_id)

        properties, total = await self.property_repo.search_properties(
            None,
            skip=(page - 1) * limit,
            limit=limit,
            owner_agent_id=agent_id,
            order_by="newest"
        )
        return [p.to_dict() for p in properties], total

    async def get_by_slug_or_id(self, slug_or_id: str, session: Optional["Session"] = None) -> Property:
        """
        Look a listing up by slug, falling back to a numeric id.

        Raises:
            NotFoundError: If missing or not visible to the caller
        """
        property_obj = await self.property_repo.get_by_slug(slug_or_id)
        if not property_obj and slug_or_id.isdigit():
            property_obj = await self.property_repo.get_by_id(int(slug_or_id))

        if not property_obj or not self._can_view(property_obj, session):
            raise NotFoundError("Property", slug_or_id)
        return property_obj

    async def list_managed(
        self,
        session: "Session",
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Back-office listing, most recently updated first.

        Admins see everything; agents see their own listings and published ones.
        """
        properties, total = await self.property_repo.search_properties(
            None,
            skip=(page - 1) * limit,
            limit=limit,
            is_admin=session.is_admin,
            viewer_agent_id=session.agent_id,
            search=search,
            order_by="updated"
        )
        return [p.to_dict() for p in properties], total

    async def get_property(self, property_id: int, session: Optional["Session"] = None) -> Property:
        """
        Get a listing by id, honouring visibility.

        Raises:
            NotFoundError: If missing or not visible to the caller
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj or not self._can_view(property_obj, session):
            raise NotFoundError("Property", property_id)
        return property_obj

    # Writes

    async def _generate_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(title)
        if not base:
            raise BadRequestError("Unable to generate slug from property title")
        taken = await self.property_repo.get_taken_slugs(base)
        if exclude_id is not None:
            current = await self.property_repo.get_by_id(exclude_id)
            if current:
                taken = [slug for slug in taken if slug != current.slug]
        return unique_slug(base, taken)

    async def _resolve_agent_id(self, requested: Optional[int], session: "Session") -> Optional[int]:
        """
        Agents always list under their own profile; admins may pick any agent.

        Raises:
            AgentProfileRequiredError: If a non-admin has no agent profile
            NotFoundError: If the requested agent doesn't exist
        """
        if not session.is_admin:
            if session.agent_id is None:
                raise AgentProfileRequiredError("An agent profile is required to manage listings")
            return session.agent_id

        if requested is not None and not await self.agent_repo.exists(requested):
            raise NotFoundError("Agent", requested)
        return requested

    async def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and not await self.category_repo.exists(category_id):
            raise NotFoundError("Category", category_id)

    async def create_property(self, property_data: PropertyCreate, session: "Session") -> Property:
        """
        Create a new listing.

        Args:
            property_data: Property creation data
            session: Caller

        Returns:
            Created property

        Raises:
            AgentProfileRequiredError: If an agent caller has no profile
            NotFoundError: If the agent or category doesn't exist
            BadRequestError: If business rules are violated
        """
        try:
            create_data = property_data.model_dump()
            create_data["agent_id"] = await self._resolve_agent_id(create_data.get("agent_id"), session)
            await self._check_category(create_data.get("category_id"))
            create_data["slug"] = await self._generate_slug(create_data["title"])

            Property(**create_data).validate_all()

            property_obj = await self.property_repo.create(create_data)
            logger.info(f"Property created by user {session.user.email}: {property_obj.slug} (ID: {property_obj.id})")
            return property_obj

        except APIException:
            raise
        except ValueError as e:
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Failed to create property for user {session.user.id}: {e}")
            raise BadRequestError(f"Failed to create property: {str(e)}")

    async def update_property(self, property_id: int, property_data: PropertyUpdate, session: "Session") -> Property:
        """
        Update a listing. The slug follows the title, and the rent period
        is cleared whenever the resulting purpose is not Rent.

        Raises:
            NotFoundError: If the property doesn't exist
            OwnershipError: If an agent targets another agent's listing
        """
        try:
            property_obj = await self.property_repo.get_by_id(property_id)
            if not property_obj:
                raise NotFoundError("Property", property_id)
            self._check_can_manage(property_obj, session)

            update_data = property_data.model_dump(exclude_unset=True)

            if "agent_id" in update_data:
                if not session.is_admin:
                    if update_data["agent_id"] != session.agent_id:
                        raise InsufficientPermissionsError("reassign listings")
                elif update_data["agent_id"] is not None and not await self.agent_repo.exists(update_data["agent_id"]):
                    raise NotFoundError("Agent", update_data["agent_id"])

            if "category_id" in update_data:
                await self._check_category(update_data["category_id"])

            if update_data.get("title") and update_data["title"] != property_obj.title:
                update_data["slug"] = await self._generate_slug(update_data["title"], exclude_id=property_id)

            purpose = update_data.get("purpose") or property_obj.purpose
            if purpose != Purpose.RENT:
                update_data["rent_period"] = None

            updated = await self.property_repo.update(property_id, update_data)
            if not updated:
                raise NotFoundError("Property", property_id)

            logger.info(f"Property {property_id} updated by user {session.user.email}")
            return updated

        except APIException:
            raise
        except ValueError as e:
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            raise BadRequestError(f"Failed to update property: {str(e)}")

    async def delete_property(self, property_id: int, session: "Session") -> None:
        """
        Delete a listing together with its stored images.

        Raises:
            NotFoundError: If the property doesn't exist
            OwnershipError: If an agent targets another agent's listing
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise NotFoundError("Property", property_id)
        self._check_can_manage(property_obj, session)

        image_urls = property_obj.image_urls
        if not await self.property_repo.delete(property_id):
            raise NotFoundError("Property", property_id)

        if self.storage:
            for url in image_urls:
                self.storage.delete_file(url)
        logger.info(f"Property {property_id} deleted by user {session.user.email}")

    # Images

    async def add_images(self, property_id: int, files: List[UploadFile], session: "Session") -> Property:
        """
        Validate, store and attach uploaded images.

        Raises:
            BadRequestError: If no files were sent
            ResourceLimitExceededError: If more than the per-request limit were sent
            FileUploadError: If a file is not a valid image
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise NotFoundError("Property", property_id)
        self._check_can_manage(property_obj, session)

        if not files:
            raise BadRequestError("No images uploaded")
        if len(files) > settings.max_images_per_upload:
            raise ResourceLimitExceededError("Images per upload", settings.max_images_per_upload)

        # Validate everything before writing anything
        contents = [await FileValidator.read_image(file) for file in files]

        urls = []
        for file, content in zip(files, contents):
            urls.append(await self.storage.save_bytes(content, file.filename, f"properties/{property_id}"))

        await self.property_repo.add_images(property_id, urls)
        logger.info(f"Added {len(urls)} images to property {property_id}")
        return await self.property_repo.get_by_id(property_id)

    async def delete_image(self, image_id: int, session: "Session") -> None:
        """
        Remove an image. Admins may remove any image, agents only images of their listings.

        Raises:
            NotFoundError: If the image doesn't exist
            OwnershipError: If the listing belongs to another agent
        """
        image = await self.property_repo.get_image(image_id)
        if not image:
            raise NotFoundError("Image", image_id)

        property_obj = await self.property_repo.get_by_id(image.property_id)
        if property_obj:
            self._check_can_manage(property_obj, session)

        url = image.url
        await self.property_repo.delete_image(image_id)
        if self.storage:
            self.storage.delete_file(url)
        logger.info(f"Deleted image {image_id} of property {image.property_id}")
