"""
Agent repository with directory filters and listing counts.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.models.agent import Agent
from app.models.property import Property
from app.models.user import User
from app.utils.filters import AgentFilters
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class AgentRepository(BaseRepository[Agent]):
    """Repository for agent profiles."""

    def __init__(self, db: AsyncSession):
        super().__init__(Agent, db)

    def _build_filter_conditions(self, filters: Optional[AgentFilters]) -> List[Any]:
        """
        Build WHERE conditions from agent directory filters.

        Args:
            filters: Directory filters

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []
        if not filters:
            return conditions

        if filters.city:
            conditions.append(Agent.city.ilike(f"%{filters.city}%"))
        if filters.language:
            conditions.append(Agent.languages.ilike(f"%{filters.language}%"))
        if filters.name:
            conditions.append(Agent.name.ilike(f"%{filters.name}%"))
        if filters.specialization:
            pattern = f"%{filters.specialization}%"
            conditions.append(or_(Agent.specialization.ilike(pattern), Agent.specialty.ilike(pattern)))
        return conditions

    async def search_agents(
        self,
        filters: Optional[AgentFilters] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Agent], int]:
        """
        Search the agent directory, best rated first.

        Args:
            filters: Directory filters
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (agents, total count)
        """
        try:
            conditions = self._build_filter_conditions(filters)

            count_query = select(func.count(Agent.id)).where(*conditions)
            total = (await self.db.execute(count_query)).scalar() or 0

            query = (
                select(Agent)
                .where(*conditions)
                .order_by(Agent.rating.desc(), Agent.created_at.desc(), Agent.id.desc())
                .offset(skip)
                .limit(limit)
            )
            agents = list((await self.db.execute(query)).scalars().all())

            logger.debug(f"Agent search returned {len(agents)} of {total}")
            return agents, total
        except Exception as e:
            logger.error(f"Failed to search agents: {e}")
            raise

    async def count_published_properties(self, agent_ids: List[int]) -> Dict[int, int]:
        """
        Count published listings per agent.

        Args:
            agent_ids: Agents to count for

        Returns:
            Mapping of agent id to published property count (0 when none)
        """
        if not agent_ids:
            return {}
        try:
            query = (
                select(Property.agent_id, func.count(Property.id))
                .where(Property.agent_id.in_(agent_ids), Property.is_published.is_(True))
                .group_by(Property.agent_id)
            )
            rows = (await self.db.execute(query)).all()
            counts = {agent_id: 0 for agent_id in agent_ids}
            counts.update({agent_id: count for agent_id, count in rows})
            return counts
        except Exception as e:
            logger.error(f"Failed to count properties for agents: {e}")
            raise

    async def get_by_user_id(self, user_id: int) -> Optional[Agent]:
        """Get the agent profile linked to a user account."""
        return await self.get_by_field("user_id", user_id)

    async def create_with_user(
        self,
        user_data: Dict[str, Any],
        agent_data: Dict[str, Any]
    ) -> Tuple[Agent, User]:
        """
        Create a user account and its agent profile in one transaction.

        Either both rows are committed or neither is.

        Args:
            user_data: email, password, name and role for the account
            agent_data: Agent profile fields

        Returns:
            Tuple of (agent, user)

        Raises:
            ValueError: If the email or password is invalid
            Exception: If database operation fails (the transaction is rolled back)
        """
        try:
            user = UserRepository.build_user(user_data)
            self.db.add(user)
            await self.db.flush()

            agent = Agent(**agent_data, user_id=user.id)
            self.db.add(agent)
            await self.db.flush()

            await self.db.commit()
            logger.info(f"Created agent {agent.id} with user account {user.email}")

            agent = await self.get_by_id(agent.id)
            return agent, agent.user
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create agent with user account: {e}")
            raise
