"""
Repositories for project listings and off-plan new projects.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete
from app.repositories.base import BaseRepository
from app.models.project import (
    Project,
    ProjectStatus,
    NewProject,
    NewProjectStatus,
    ProjectImage,
    PaymentMilestone,
)
from app.utils.filters import NewProjectFilters
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class ProjectRepository(BaseRepository[Project]):
    """Repository for the projects listing."""

    def __init__(self, db: AsyncSession):
        super().__init__(Project, db)

    async def search_projects(
        self,
        location: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        featured: Optional[bool] = None,
        skip: int = 0,
        limit: int = 12
    ) -> Tuple[List[Project], int]:
        """
        Search projects, featured first then newest.

        Returns:
            Tuple of (projects, total count)
        """
        try:
            conditions = []
            if location:
                conditions.append(Project.location.ilike(f"%{location}%"))
            if status:
                conditions.append(Project.status == status)
            if min_price is not None:
                conditions.append(Project.price_from >= min_price)
            if max_price is not None:
                conditions.append(Project.price_from <= max_price)
            if featured:
                conditions.append(Project.is_featured.is_(True))

            total = (await self.db.execute(select(func.count(Project.id)).where(*conditions))).scalar() or 0
            query = (
                select(Project)
                .where(*conditions)
                .order_by(Project.is_featured.desc(), Project.created_at.desc(), Project.id.desc())
                .offset(skip)
                .limit(limit)
            )
            projects = list((await self.db.execute(query)).scalars().all())
            return projects, total
        except Exception as e:
            logger.error(f"Failed to search projects: {e}")
            raise

    async def get_featured(self, limit: int = 6) -> List[Project]:
        """Featured projects, newest first."""
        query = (
            select(Project)
            .where(Project.is_featured.is_(True))
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(limit)
        )
        return list((await self.db.execute(query)).scalars().all())


class NewProjectRepository(BaseRepository[NewProject]):
    """Repository for new projects with their gallery and payment plan."""

    def __init__(self, db: AsyncSession):
        super().__init__(NewProject, db)

    def _build_filter_conditions(self, filters: Optional[NewProjectFilters]) -> List[Any]:
        conditions = []
        if not filters:
            return conditions

        if filters.location:
            conditions.append(NewProject.location.ilike(f"%{filters.location}%"))
        if filters.status:
            try:
                conditions.append(NewProject.status == NewProjectStatus(filters.status))
            except ValueError:
                # Unknown status matches nothing
                conditions.append(NewProject.id.is_(None))
        if filters.category:
            conditions.append(NewProject.category == filters.category)
        if filters.min_beds is not None:
            conditions.append(NewProject.beds >= filters.min_beds)
        if filters.handover:
            conditions.append(NewProject.handover.ilike(f"%{filters.handover}%"))
        if filters.payment_plan:
            conditions.append(NewProject.payment_plan_label.ilike(f"%{filters.payment_plan}%"))
        if filters.min_completion is not None:
            conditions.append(NewProject.completion_percent >= filters.min_completion)
        return conditions

    async def search_new_projects(
        self,
        filters: Optional[NewProjectFilters] = None,
        published_only: bool = True
    ) -> List[NewProject]:
        """
        List new projects newest first.

        Args:
            filters: Catalogue filters
            published_only: Hide unpublished projects

        Returns:
            List of projects
        """
        try:
            conditions = self._build_filter_conditions(filters)
            if published_only:
                conditions.append(NewProject.is_published.is_(True))

            query = (
                select(NewProject)
                .where(*conditions)
                .order_by(NewProject.created_at.desc(), NewProject.id.desc())
            )
            return list((await self.db.execute(query)).scalars().all())
        except Exception as e:
            logger.error(f"Failed to search new projects: {e}")
            raise

    async def get_by_slug(self, slug: str, published_only: bool = True) -> Optional[NewProject]:
        """Get a project by slug."""
        project = await self.get_by_field("slug", slug)
        if project and published_only and not project.is_published:
            return None
        return project

    async def get_taken_slugs(self, base: str) -> List[str]:
        return await self.get_taken_values("slug", base)

    async def create_project(self, project_data: Dict[str, Any], milestones: List[Dict[str, Any]]) -> NewProject:
        """
        Create a project together with its payment plan.

        Args:
            project_data: Project columns
            milestones: Milestone rows in display order

        Returns:
            Created project
        """
        try:
            project = NewProject(**project_data)
            project.milestones = [
                PaymentMilestone(**milestone, sort_order=index)
                for index, milestone in enumerate(milestones)
            ]
            self.db.add(project)
            await self.db.commit()
            logger.info(f"Created new project {project.slug} (ID: {project.id})")
            return await self.get_by_id(project.id)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create new project: {e}")
            raise

    async def replace_milestones(self, project_id: int, milestones: List[Dict[str, Any]]) -> None:
        """Replace a project's payment plan."""
        try:
            await self.db.execute(
                delete(PaymentMilestone)
                .where(PaymentMilestone.project_id == project_id)
                .execution_options(synchronize_session=False)
            )
            self.db.add_all([
                PaymentMilestone(project_id=project_id, sort_order=index, **milestone)
                for index, milestone in enumerate(milestones)
            ])
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to replace payment plan of project {project_id}: {e}")
            raise

    # Images

    async def add_images(self, project_id: int, urls: List[str]) -> List[ProjectImage]:
        """Append gallery images in the given order."""
        try:
            current = (await self.db.execute(
                select(func.max(ProjectImage.sort_order)).where(ProjectImage.project_id == project_id)
            )).scalar()
            start = 0 if current is None else current + 1
            images = [
                ProjectImage(project_id=project_id, url=url, sort_order=start + offset)
                for offset, url in enumerate(urls)
            ]
            self.db.add_all(images)
            await self.db.commit()
            return images
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add images to project {project_id}: {e}")
            raise

    async def get_image(self, image_id: int) -> Optional[ProjectImage]:
        result = await self.db.execute(select(ProjectImage).where(ProjectImage.id == image_id))
        return result.scalar_one_or_none()

    async def delete_image(self, image_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(ProjectImage)
                .where(ProjectImage.id == image_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete project image {image_id}: {e}")
            raise
