"""
Project services: the projects listing and the off-plan new projects catalogue.
"""

from typing import Optional, List, Dict, Any, Tuple
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from app.config import settings
from app.repositories.project import ProjectRepository, NewProjectRepository
from app.models.project import Project, ProjectStatus, NewProject
from app.schemas.project import ProjectCreate, ProjectUpdate, NewProjectCreate, NewProjectUpdate
from app.utils.filters import NewProjectFilters
from app.utils.file_utils import FileValidator, FileStorage
from app.utils.slug import slugify, unique_slug
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    DuplicateResourceError,
    ResourceLimitExceededError
)
import logging

logger = logging.getLogger(__name__)


class ProjectService:
    """Projects listing CRUD."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.project_repo = ProjectRepository(db_session)

    async def list_projects(
        self,
        location: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 12
    ) -> Tuple[List[Project], int]:
        return await self.project_repo.search_projects(
            location=location,
            status=status,
            min_price=min_price,
            max_price=max_price,
            featured=featured,
            skip=(page - 1) * limit,
            limit=limit
        )

    async def featured_projects(self, limit: int = 6) -> List[Project]:
        return await self.project_repo.get_featured(limit)

    async def get_project(self, project_id: int) -> Project:
        project = await self.project_repo.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project", project_id)
        return project

    async def create_project(self, data: ProjectCreate) -> Project:
        project = await self.project_repo.create(data.model_dump())
        logger.info(f"Created project {project.id}: {project.title}")
        return project

    async def update_project(self, project_id: int, data: ProjectUpdate) -> Project:
        project = await self.project_repo.update(project_id, data.model_dump(exclude_unset=True))
        if not project:
            raise NotFoundError("Project", project_id)
        logger.info(f"Updated project {project_id}")
        return project

    async def delete_project(self, project_id: int) -> None:
        if not await self.project_repo.delete(project_id):
            raise NotFoundError("Project", project_id)
        logger.info(f"Deleted project {project_id}")


class NewProjectService:
    """
    New projects catalogue with gallery and payment plan management.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.project_repo = NewProjectRepository(db_session)
        self.storage = storage

    # Public catalogue

    async def list_published(self, filters: Optional[NewProjectFilters] = None) -> List[Dict[str, Any]]:
        projects = await self.project_repo.search_new_projects(filters, published_only=True)
        return [project.to_dict() for project in projects]

    async def get_published(self, slug: str) -> Dict[str, Any]:
        """
        Published project with images and payment plan.

        Raises:
            NotFoundError: If missing or unpublished
        """
        project = await self.project_repo.get_by_slug(slug, published_only=True)
        if not project:
            raise NotFoundError("Project", slug)
        return project.to_dict(include_details=True)

    # Administration

    async def list_all(self) -> List[NewProject]:
        return await self.project_repo.search_new_projects(None, published_only=False)

    async def get_project(self, project_id: int) -> NewProject:
        project = await self.project_repo.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project", project_id)
        return project

    async def create_project(self, data: NewProjectCreate) -> NewProject:
        """
        Create a project; the slug is derived from the name when not given.

        Raises:
            DuplicateResourceError: If an explicit slug is taken
            BadRequestError: If no slug can be derived
        """
        try:
            project_data = data.model_dump(exclude={"payment_plan"}, exclude_none=True)
            milestones = [m.model_dump() for m in data.payment_plan or []]

            if data.slug:
                if await self.project_repo.get_by_slug(data.slug, published_only=False):
                    raise DuplicateResourceError("Project", data.slug)
            else:
                base = slugify(data.name)
                if not base:
                    raise BadRequestError("Unable to generate slug from project name")
                project_data["slug"] = unique_slug(base, await self.project_repo.get_taken_slugs(base))

            project = await self.project_repo.create_project(project_data, milestones)
            logger.info(f"Created new project {project.slug}")
            return project

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create new project: {e}")
            raise BadRequestError(f"Failed to create project: {str(e)}")

    async def update_project(self, project_id: int, data: NewProjectUpdate) -> NewProject:
        """
        Update a project; a provided payment plan replaces the existing one.

        Raises:
            NotFoundError: If the project doesn't exist
        """
        try:
            await self.get_project(project_id)
            update_data = data.model_dump(exclude_unset=True, exclude={"payment_plan"})
            if update_data:
                await self.project_repo.update(project_id, update_data)
            if data.payment_plan is not None:
                await self.project_repo.replace_milestones(
                    project_id,
                    [m.model_dump() for m in data.payment_plan]
                )
            logger.info(f"Updated new project {project_id}")
            return await self.get_project(project_id)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update new project {project_id}: {e}")
            raise BadRequestError(f"Failed to update project: {str(e)}")

    async def delete_project(self, project_id: int) -> None:
        project = await self.get_project(project_id)
        image_urls = [image.url for image in project.images]
        await self.project_repo.delete(project_id)
        if self.storage:
            for url in image_urls:
                self.storage.delete_file(url)
        logger.info(f"Deleted new project {project_id}")

    async def add_images(self, project_id: int, files: List[UploadFile]) -> NewProject:
        """
        Attach gallery images (at most the per-request limit, images only).

        Raises:
            BadRequestError: If no files were sent
            ResourceLimitExceededError: If too many files were sent
        """
        await self.get_project(project_id)
        if not files:
            raise BadRequestError("No images uploaded")
        if len(files) > settings.max_images_per_upload:
            raise ResourceLimitExceededError("Images per upload", settings.max_images_per_upload)

        contents = [await FileValidator.read_image(file) for file in files]
        urls = []
        for file, content in zip(files, contents):
            urls.append(await self.storage.save_bytes(content, file.filename, f"projects/{project_id}"))

        await self.project_repo.add_images(project_id, urls)
        logger.info(f"Added {len(urls)} images to new project {project_id}")
        return await self.get_project(project_id)

    async def delete_image(self, image_id: int) -> None:
        image = await self.project_repo.get_image(image_id)
        if not image:
            raise NotFoundError("Image", image_id)
        url = image.url
        await self.project_repo.delete_image(image_id)
        if self.storage:
            self.storage.delete_file(url)
        logger.info(f"Deleted project image {image_id}")
