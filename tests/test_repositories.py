"""
Tests for the repository layer.
Covers CRUD, search filters, visibility rules, ordering and counts.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from app.models.user import UserRole
from app.models.contact import ContactStatus
from app.models.project import ProjectStatus, NewProjectStatus
from app.repositories.user import UserRepository
from app.repositories.agent import AgentRepository
from app.repositories.property import PropertyRepository
from app.repositories.category import CategoryRepository
from app.repositories.contact import ContactRepository
from app.repositories.project import ProjectRepository, NewProjectRepository
from app.repositories.service import ServiceRepository
from app.repositories.story import StoryRepository
from app.repositories.password_reset import PasswordResetTokenRepository
from app.utils.filters import Purpose, PropertyFilters, AgentFilters, NewProjectFilters
from tests.conftest import NOW, UserFactory, AgentFactory, PropertyFactory, StoryFactory


class TestBaseRepository:
    """Test generic CRUD behaviour through the user repository."""

    async def test_get_missing(self, user_repository: UserRepository):
        """Missing ids return None."""
        assert await user_repository.get_by_id(999) is None
        assert await user_repository.exists(999) is False

    async def test_update_only_given_fields(self, user_repository: UserRepository):
        """Only the keys passed are written."""
        user = await UserFactory.create_user(user_repository.db, name="Before")

        updated = await user_repository.update(user.id, {"name": "After", "unknown": "ignored"})

        assert updated.name == "After"
        assert updated.email == user.email

    async def test_update_missing(self, user_repository: UserRepository):
        """Updating a missing row returns None."""
        assert await user_repository.update(999, {"name": "X"}) is None

    async def test_delete(self, user_repository: UserRepository):
        """Deleting reports whether a row was removed."""
        user = await UserFactory.create_user(user_repository.db)

        assert await user_repository.delete(user.id) is True
        assert await user_repository.delete(user.id) is False

    async def test_count_with_filters(self, user_repository: UserRepository):
        """Counts honour equality filters."""
        await UserFactory.create_user(user_repository.db, role=UserRole.ADMIN)
        await UserFactory.create_user(user_repository.db)
        await UserFactory.create_user(user_repository.db)

        assert await user_repository.count() == 3
        assert await user_repository.count({"role": UserRole.USER}) == 2

    async def test_get_by_unknown_field(self, user_repository: UserRepository):
        """Unknown fields are rejected."""
        with pytest.raises(ValueError):
            await user_repository.get_by_field("nope", 1)


class TestUserRepository:
    """Test user account operations."""

    async def test_email_lookup_is_case_insensitive(self, user_repository: UserRepository):
        """Emails are stored lowercased and looked up the same way."""
        await UserFactory.create_user(user_repository.db, email="Mixed@Example.com")

        user = await user_repository.get_by_email("MIXED@example.com ")

        assert user is not None
        assert user.email == "mixed@example.com"

    async def test_authenticate(self, user_repository: UserRepository):
        """Correct credentials authenticate, others don't."""
        await UserFactory.create_user(user_repository.db, email="login@example.com", password="secret12")

        assert await user_repository.authenticate_user("login@example.com", "secret12") is not None
        assert await user_repository.authenticate_user("login@example.com", "wrong") is None
        assert await user_repository.authenticate_user("nobody@example.com", "secret12") is None

    async def test_inactive_user_cannot_authenticate(self, user_repository: UserRepository):
        """Inactive accounts are refused."""
        await UserFactory.create_user(user_repository.db, email="off@example.com", password="secret12", is_active=False)

        assert await user_repository.authenticate_user("off@example.com", "secret12") is None

    async def test_invalid_data(self, user_repository: UserRepository):
        """Bad emails and short passwords never reach the database."""
        with pytest.raises(ValueError):
            await UserFactory.create_user(user_repository.db, email="not-an-email")
        with pytest.raises(ValueError):
            await UserFactory.create_user(user_repository.db, password="123")

    async def test_update_password(self, user_repository: UserRepository):
        """Passwords are re-hashed on update."""
        user = await UserFactory.create_user(user_repository.db, password="oldpass1")

        assert await user_repository.update_password(user.id, "newpass1") is True

        reloaded = await user_repository.get_by_id(user.id)
        assert reloaded.verify_password("newpass1")


class TestAgentRepository:
    """Test the agent directory."""

    async def test_search_filters(self, agent_repository: AgentRepository):
        """City, language, name and specialization filters combine."""
        db = agent_repository.db
        await AgentFactory.create_agent(db, name="Sarah Johnson", city="Garowe", languages="English, Somali")
        await AgentFactory.create_agent(db, name="Michael Chen", city="Mogadishu", languages="English")
        await AgentFactory.create_agent(db, name="Emily Rodriguez", city="Garowe", languages="Arabic",
                                        specialization="Commercial", specialty="Offices")

        agents, total = await agent_repository.search_agents(AgentFilters(city="garowe"))
        assert total == 2

        agents, total = await agent_repository.search_agents(AgentFilters(language="somali"))
        assert [a.name for a in agents] == ["Sarah Johnson"]

        agents, total = await agent_repository.search_agents(AgentFilters(specialization="offices"))
        assert [a.name for a in agents] == ["Emily Rodriguez"]

        agents, total = await agent_repository.search_agents(AgentFilters(name="chen", city="Garowe"))
        assert total == 0

    async def test_best_rated_first(self, agent_repository: AgentRepository):
        """The directory is ordered by rating."""
        db = agent_repository.db
        await AgentFactory.create_agent(db, name="Low", rating=Decimal("3.1"))
        await AgentFactory.create_agent(db, name="High", rating=Decimal("4.9"))

        agents, _ = await agent_repository.search_agents(None)

        assert [a.name for a in agents] == ["High", "Low"]

    async def test_count_published_properties(self, agent_repository: AgentRepository):
        """Only published listings count, and agents without listings get zero."""
        db = agent_repository.db
        busy = await AgentFactory.create_agent(db, name="Busy")
        idle = await AgentFactory.create_agent(db, name="Idle")
        await PropertyFactory.create_property(db, agent_id=busy.id)
        await PropertyFactory.create_property(db, agent_id=busy.id)
        await PropertyFactory.create_property(db, agent_id=busy.id, is_published=False)

        counts = await agent_repository.count_published_properties([busy.id, idle.id])

        assert counts == {busy.id: 2, idle.id: 0}
        assert await agent_repository.count_published_properties([]) == {}

    async def test_create_with_user(self, agent_repository: AgentRepository):
        """The account and profile are created and linked together."""
        agent = await AgentFactory.create_agent_with_user(agent_repository.db, email="New.Agent@Example.com")

        assert agent.user is not None
        assert agent.user.email == "new.agent@example.com"
        assert agent.user.role == UserRole.AGENT
        assert (await agent_repository.get_by_user_id(agent.user_id)).id == agent.id

    async def test_create_with_user_rolls_back(self, agent_repository: AgentRepository):
        """A duplicate email leaves neither row behind."""
        db = agent_repository.db
        await UserFactory.create_user(db, email="taken@example.com")

        with pytest.raises(Exception):
            await AgentFactory.create_agent_with_user(db, email="taken@example.com")

        assert await agent_repository.count() == 0
        assert await UserRepository(db).count() == 1


class TestPropertyRepository:
    """Test listing search, visibility and images."""

    async def test_filters(self, property_repository: PropertyRepository):
        """Purpose, type, rooms, price and location filters apply."""
        db = property_repository.db
        await PropertyFactory.create_property(db, title="Cheap rental", purpose=Purpose.RENT,
                                              price=Decimal("500"), beds=1, baths=1, type="Apartment")
        await PropertyFactory.create_property(db, title="Big villa", price=Decimal("900000"), beds=6, baths=4,
                                              location="Hodan District", city="Mogadishu")
        await PropertyFactory.create_property(db, title="Family home", price=Decimal("250000"), beds=3)

        _, total = await property_repository.search_properties(PropertyFilters(purpose="rent"))
        assert total == 1

        found, _ = await property_repository.search_properties(PropertyFilters(purpose=None, type="apartment"))
        assert [p.title for p in found] == ["Cheap rental"]

        found, _ = await property_repository.search_properties(PropertyFilters(beds=2, maxBeds=4))
        assert [p.title for p in found] == ["Family home"]

        found, _ = await property_repository.search_properties(PropertyFilters(minPrice=Decimal("300000")))
        assert [p.title for p in found] == ["Big villa"]

        found, _ = await property_repository.search_properties(PropertyFilters(location="hodan"))
        assert [p.title for p in found] == ["Big villa"]

        found, _ = await property_repository.search_properties(PropertyFilters(city="mogadishu", baths=4, maxBaths=4))
        assert [p.title for p in found] == ["Big villa"]

    async def test_visibility(self, property_repository: PropertyRepository):
        """Drafts are visible to admins and their own agent only."""
        db = property_repository.db
        owner = await AgentFactory.create_agent(db, name="Owner")
        other = await AgentFactory.create_agent(db, name="Other")
        await PropertyFactory.create_property(db, title="Public")
        await PropertyFactory.create_property(db, title="Draft", agent_id=owner.id, is_published=False)

        _, public_total = await property_repository.search_properties(None)
        _, admin_total = await property_repository.search_properties(None, is_admin=True)
        _, owner_total = await property_repository.search_properties(None, viewer_agent_id=owner.id)
        _, other_total = await property_repository.search_properties(None, viewer_agent_id=other.id)

        assert (public_total, admin_total, owner_total, other_total) == (1, 2, 2, 1)

    async def test_featured_first(self, property_repository: PropertyRepository):
        """Featured listings come before newer regular ones."""
        db = property_repository.db
        await PropertyFactory.create_property(db, title="Featured", is_featured=True)
        await PropertyFactory.create_property(db, title="Newer")

        found, _ = await property_repository.search_properties(None)

        assert [p.title for p in found] == ["Featured", "Newer"]

    async def test_pagination(self, property_repository: PropertyRepository):
        """Pages are sliced while the total stays whole."""
        db = property_repository.db
        for index in range(5):
            await PropertyFactory.create_property(db, title=f"Listing {index}")

        found, total = await property_repository.search_properties(None, skip=4, limit=2)

        assert total == 5
        assert len(found) == 1

    async def test_free_text_search(self, property_repository: PropertyRepository):
        """Search matches title, location or city."""
        db = property_repository.db
        await PropertyFactory.create_property(db, title="Seaside Paradise")
        await PropertyFactory.create_property(db, title="Urban Loft", location="Bosaso", city="Bosaso")

        found, _ = await property_repository.search_properties(None, search="seaside")
        assert [p.title for p in found] == ["Seaside Paradise"]

        found, _ = await property_repository.search_properties(None, search="bosaso")
        assert [p.title for p in found] == ["Urban Loft"]

    async def test_featured_requires_agent(self, property_repository: PropertyRepository):
        """Featured listings without an agent or unpublished are left out."""
        db = property_repository.db
        agent = await AgentFactory.create_agent(db)
        await PropertyFactory.create_property(db, title="Shown", is_featured=True, agent_id=agent.id)
        await PropertyFactory.create_property(db, title="No agent", is_featured=True)
        await PropertyFactory.create_property(db, title="Draft", is_featured=True, agent_id=agent.id,
                                              is_published=False)
        await PropertyFactory.create_property(db, title="Regular", agent_id=agent.id)

        featured = await property_repository.get_featured()

        assert [p.title for p in featured] == ["Shown"]

    async def test_taken_slugs(self, property_repository: PropertyRepository):
        """Slugs sharing a prefix are collected."""
        db = property_repository.db
        await PropertyFactory.create_property(db, slug="villa")
        await PropertyFactory.create_property(db, slug="villa-2")
        await PropertyFactory.create_property(db, slug="loft")

        assert sorted(await property_repository.get_taken_slugs("villa")) == ["villa", "villa-2"]

    async def test_images_append_in_order(self, property_repository: PropertyRepository):
        """New images are appended after existing ones."""
        property_obj = await PropertyFactory.create_property(property_repository.db)
        await property_repository.add_images(property_obj.id, ["/uploads/a.jpg"])
        await property_repository.add_images(property_obj.id, ["/uploads/b.jpg", "/uploads/c.jpg"])

        reloaded = await property_repository.get_by_id(property_obj.id)

        assert reloaded.image_urls == ["/uploads/a.jpg", "/uploads/b.jpg", "/uploads/c.jpg"]
        assert await property_repository.count_images(property_obj.id) == 3


class TestCategoryRepository:
    """Test category listing with counts."""

    async def test_counts_published_only(self, db_session):
        """Counts include published listings only, inactive categories are hidden."""
        repo = CategoryRepository(db_session)
        residential = await repo.create({"name": "Residential", "slug": "residential"})
        await repo.create({"name": "Archived", "slug": "archived", "is_active": False})
        await PropertyFactory.create_property(db_session, category_id=residential.id)
        await PropertyFactory.create_property(db_session, category_id=residential.id, is_published=False)

        active = await repo.list_with_counts()
        everything = await repo.list_with_counts(active_only=False)

        assert [(c.slug, n) for c, n in active] == [("residential", 1)]
        assert [c.slug for c, _ in everything] == ["archived", "residential"]


class TestContactRepository:
    """Test contact submissions."""

    async def test_status_filter(self, db_session):
        """Submissions can be filtered by status."""
        repo = ContactRepository(db_session)
        first = await repo.create({"name": "A", "email": "a@example.com", "message": "Hello"})
        await repo.create({"name": "B", "email": "b@example.com", "message": "Hi"})
        await repo.update(first.id, {"status": ContactStatus.CLOSED})

        contacts, total = await repo.list_contacts(status=ContactStatus.NEW)
        _, everything = await repo.list_contacts()

        assert total == 1
        assert contacts[0].name == "B"
        assert everything == 2


class TestProjectRepositories:
    """Test projects and new projects."""

    async def test_project_search(self, db_session):
        """Project filters apply and featured projects come first."""
        repo = ProjectRepository(db_session)
        await repo.create({"title": "Harbour Towers", "location": "Berbera", "price_from": Decimal("90000"),
                           "status": ProjectStatus.ONGOING})
        await repo.create({"title": "Palm Gardens", "location": "Garowe", "price_from": Decimal("150000"),
                           "is_featured": True})

        found, total = await repo.search_projects()
        assert total == 2
        assert found[0].title == "Palm Gardens"

        found, _ = await repo.search_projects(status=ProjectStatus.ONGOING)
        assert [p.title for p in found] == ["Harbour Towers"]

        found, _ = await repo.search_projects(max_price=Decimal("100000"))
        assert [p.title for p in found] == ["Harbour Towers"]

        found, _ = await repo.search_projects(featured=True, location="gar")
        assert [p.title for p in found] == ["Palm Gardens"]

    async def test_new_project_with_milestones(self, db_session):
        """Payment plans keep their order and can be replaced."""
        repo = NewProjectRepository(db_session)
        project = await repo.create_project(
            {"name": "Ocean One", "slug": "ocean-one", "developer": "Dev Co", "location": "Berbera"},
            [{"label": "Booking", "percent": Decimal("20")}, {"label": "Handover", "percent": Decimal("80")}]
        )

        assert [m.label for m in project.milestones] == ["Booking", "Handover"]

        await repo.replace_milestones(project.id, [{"label": "Full", "percent": Decimal("100")}])
        reloaded = await repo.get_by_id(project.id)

        assert [m.to_dict()["percent"] for m in reloaded.milestones] == [100.0]

    async def test_new_project_filters(self, db_session):
        """Catalogue filters apply and unpublished projects are hidden."""
        repo = NewProjectRepository(db_session)
        await repo.create_project({"name": "Ready Homes", "slug": "ready-homes", "developer": "D",
                                   "location": "Garowe", "status": NewProjectStatus.READY,
                                   "completion_percent": 100, "payment_plan_label": "100/0"}, [])
        await repo.create_project({"name": "Sky Rise", "slug": "sky-rise", "developer": "D",
                                   "location": "Mogadishu", "completion_percent": 40,
                                   "payment_plan_label": "60/40", "beds": 2}, [])
        await repo.create_project({"name": "Hidden", "slug": "hidden", "developer": "D",
                                   "location": "Garowe", "is_published": False}, [])

        assert len(await repo.search_new_projects()) == 2
        assert len(await repo.search_new_projects(published_only=False)) == 3

        found = await repo.search_new_projects(NewProjectFilters(status="Ready"))
        assert [p.slug for p in found] == ["ready-homes"]

        found = await repo.search_new_projects(NewProjectFilters(paymentPlan="60/40", beds=2))
        assert [p.slug for p in found] == ["sky-rise"]

        found = await repo.search_new_projects(NewProjectFilters(completion=50))
        assert [p.slug for p in found] == ["ready-homes"]

        assert await repo.search_new_projects(NewProjectFilters(status="Demolished")) == []
        assert await repo.get_by_slug("hidden") is None
        assert await repo.get_by_slug("hidden", published_only=False) is not None


class TestServiceRepository:
    """Test the services catalogue."""

    async def test_active_only(self, db_session):
        """Inactive services are hidden unless asked for."""
        repo = ServiceRepository(db_session)
        await repo.create({"title": "Valuation"})
        await repo.create({"title": "Legacy", "is_active": False})

        assert [s.title for s in await repo.list_services()] == ["Valuation"]
        assert len(await repo.list_services(active_only=False)) == 2


class TestStoryRepository:
    """Test story expiry at read time."""

    async def test_expired_and_inactive_hidden(self, story_repository: StoryRepository):
        """Only active, unexpired stories are returned, newest first."""
        db = story_repository.db
        agent = await AgentFactory.create_agent(db)
        old = await StoryFactory.create_story(db, agent.id, created_at=NOW - timedelta(hours=2))
        new = await StoryFactory.create_story(db, agent.id, created_at=NOW - timedelta(minutes=5))
        await StoryFactory.create_story(db, agent.id, created_at=NOW - timedelta(hours=25))
        await StoryFactory.create_story(db, agent.id, created_at=NOW - timedelta(minutes=1), is_active=False)

        stories = await story_repository.get_active(NOW)

        assert [s.id for s in stories] == [new.id, old.id]

    async def test_expiry_boundary(self, story_repository: StoryRepository):
        """A story expiring exactly now is hidden."""
        db = story_repository.db
        agent = await AgentFactory.create_agent(db)
        await StoryFactory.create_story(db, agent.id, created_at=NOW - timedelta(hours=24))

        assert await story_repository.get_active(NOW) == []

    async def test_agent_filter(self, story_repository: StoryRepository):
        """Stories can be limited to one agent."""
        db = story_repository.db
        first = await AgentFactory.create_agent(db, name="First")
        second = await AgentFactory.create_agent(db, name="Second")
        await StoryFactory.create_story(db, first.id)
        await StoryFactory.create_story(db, second.id)

        stories = await story_repository.get_active(NOW, agent_id=second.id)

        assert [s.agent.name for s in stories] == ["Second"]

    async def test_deleting_agent_removes_stories(self, story_repository: StoryRepository):
        """Stories cascade with their agent."""
        db = story_repository.db
        agent = await AgentFactory.create_agent(db)
        await StoryFactory.create_story(db, agent.id)

        await AgentRepository(db).delete(agent.id)

        assert await story_repository.count() == 0


class TestPasswordResetTokenRepository:
    """Test reset token lookup."""

    async def test_get_usable(self, db_session):
        """Used or expired tokens are not found."""
        user = await UserFactory.create_user(db_session)
        repo = PasswordResetTokenRepository(db_session)
        token = await repo.create({"user_id": user.id, "token_hash": "a" * 64,
                                   "expires_at": NOW + timedelta(minutes=30), "used": False})

        assert (await repo.get_usable("a" * 64, NOW)).id == token.id
        assert await repo.get_usable("a" * 64, NOW + timedelta(hours=1)) is None

        await repo.mark_used(token.id)
        assert await repo.get_usable("a" * 64, NOW) is None
