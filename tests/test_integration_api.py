"""
Integration tests for the HTTP API.
Exercises complete request flows through routing, dependencies, services
and the response envelope.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient

from app.models.contact import Contact
from app.models.category import Category
from app.models.project import NewProject, NewProjectStatus
from app.repositories.base import BaseRepository
from app.utils.filters import Purpose
from tests.conftest import AgentFactory, PropertyFactory, StoryFactory, png_bytes


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Sea View Villa",
        "type": "Villa",
        "purpose": "buy",
        "price": 450000,
        "beds": 4,
        "baths": 3,
        "location": "Hodan District",
        "city": "Mogadishu",
        "amenities": ["Parking", "Garden"],
    }
    payload.update(overrides)
    return payload


def recent(minutes: int = 5) -> datetime:
    """A creation time relative to the real clock, for endpoints that read the current time."""
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


class TestEnvelope:
    """Test the shared response envelope."""

    async def test_root(self, async_client: AsyncClient):
        """The root endpoint describes the API."""
        response = await async_client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["api_prefix"] == "/api"

    async def test_health(self, async_client: AsyncClient):
        """Health reports a connected database."""
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"

    async def test_unknown_route(self, async_client: AsyncClient):
        """Unknown routes use the error envelope."""
        response = await async_client.get("/api/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Route not found"
        assert body["error"]["code"] == "HTTP_404"
        assert "timestamp" in body["error"]
        assert "request_id" in body["error"]

    async def test_validation_error_details(self, async_client: AsyncClient):
        """Invalid bodies list each failing field."""
        response = await async_client.post("/api/auth/register", json={"name": "A", "email": "bad", "password": "1"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("Request validation failed")
        fields = [detail["field"] for detail in body["error"]["details"]]
        assert any("email" in field for field in fields)
        assert any("password" in field for field in fields)

    async def test_invalid_query_parameter(self, async_client: AsyncClient):
        """Out-of-range query values are rejected."""
        response = await async_client.get("/api/properties", params={"page": 0})

        assert response.status_code == 422


class TestAuthFlow:
    """Test registration, login and the current user."""

    async def test_register_login_me(self, async_client: AsyncClient):
        """A registered user can log in and read their own account."""
        register = await async_client.post(
            "/api/auth/register",
            json={"name": "Amina Yusuf", "email": "Amina@Example.com", "password": "secret123"}
        )
        assert register.status_code == 201
        body = register.json()
        assert body["message"] == "Registration successful"
        assert body["data"]["token_type"] == "bearer"
        assert body["data"]["user"]["email"] == "amina@example.com"
        assert body["data"]["user"]["role"] == "user"

        login = await async_client.post(
            "/api/auth/login",
            json={"email": "amina@example.com", "password": "secret123"}
        )
        assert login.status_code == 200
        assert login.json()["message"] == "Login successful"
        token = login.json()["data"]["token"]

        me = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Amina Yusuf"

    async def test_duplicate_registration(self, async_client: AsyncClient, plain_user):
        """Registering an existing email conflicts."""
        response = await async_client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "user@example.com", "password": "secret123"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    async def test_wrong_password(self, async_client: AsyncClient, plain_user):
        """Bad credentials are unauthorized."""
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "user@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_agent_login_carries_agent_id(self, async_client: AsyncClient, agent_with_user):
        """Agents see their profile id in the login payload."""
        response = await async_client.post(
            "/api/auth/login",
            json={"email": "sarah@example.com", "password": "agentpass123"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["agent_id"] == agent_with_user.id

    async def test_missing_token(self, async_client: AsyncClient):
        """Protected endpoints require a token."""
        response = await async_client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication token required"

    async def test_invalid_token(self, async_client: AsyncClient):
        """Garbage tokens are rejected."""
        response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_logout(self, async_client: AsyncClient, user_headers):
        """Logout acknowledges the request."""
        response = await async_client.post("/api/auth/logout", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

    async def test_forgot_password_does_not_reveal_accounts(self, async_client: AsyncClient, plain_user):
        """Known and unknown emails get the same answer."""
        known = await async_client.post("/api/auth/forgot-password", json={"email": "user@example.com"})
        unknown = await async_client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"]

    async def test_reset_password_with_unknown_token(self, async_client: AsyncClient):
        """Unknown reset tokens are rejected."""
        response = await async_client.post(
            "/api/auth/reset-password",
            json={"token": "not-a-real-token", "password": "newsecret1"}
        )

        assert response.status_code == 400


class TestPublicProperties:
    """Test the public property listing."""

    async def test_list_with_filters_and_pagination(self, async_client: AsyncClient, db_session):
        """Filters narrow the list and pagination is reported."""
        agent = await AgentFactory.create_agent(db_session)
        for beds in (1, 2, 3, 4):
            await PropertyFactory.create_property(db_session, beds=beds, agent_id=agent.id)
        await PropertyFactory.create_property(db_session, purpose=Purpose.RENT, beds=3)

        response = await async_client.get(
            "/api/properties",
            params={"purpose": "buy", "beds": 2, "limit": 2}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert len(body["data"]) == 2
        assert all(item["purpose"] == "Sale" for item in body["data"])

    async def test_purpose_absent_means_all(self, async_client: AsyncClient, db_session):
        """Without a purpose both sales and rentals are listed."""
        await PropertyFactory.create_property(db_session, purpose=Purpose.SALE)
        await PropertyFactory.create_property(db_session, purpose=Purpose.RENT)

        response = await async_client.get("/api/properties")

        assert response.json()["pagination"]["total"] == 2

    async def test_drafts_hidden(self, async_client: AsyncClient, db_session):
        """Unpublished listings are not public."""
        draft = await PropertyFactory.create_property(db_session, is_published=False)

        listing = await async_client.get("/api/properties")
        detail = await async_client.get(f"/api/properties/{draft.slug}")

        assert listing.json()["pagination"]["total"] == 0
        assert detail.status_code == 404
        assert detail.json()["error"]["code"] == "NOT_FOUND"

    async def test_get_by_slug_and_id(self, async_client: AsyncClient, db_session):
        """Listings are found by slug or numeric id."""
        property_obj = await PropertyFactory.create_property(db_session, title="Garden House", slug="garden-house")

        by_slug = await async_client.get("/api/properties/garden-house")
        by_id = await async_client.get(f"/api/properties/{property_obj.id}")

        assert by_slug.json()["data"]["title"] == "Garden House"
        assert by_id.json()["data"]["slug"] == "garden-house"

    async def test_featured(self, async_client: AsyncClient, db_session):
        """Featured listings need an agent."""
        agent = await AgentFactory.create_agent(db_session)
        await PropertyFactory.create_property(db_session, is_featured=True, agent_id=agent.id)
        await PropertyFactory.create_property(db_session, is_featured=True)
        await PropertyFactory.create_property(db_session, agent_id=agent.id)

        response = await async_client.get("/api/properties/featured")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1
        assert response.json()["data"][0]["agent_name"] == "Sarah Johnson"


class TestPropertyManagement:
    """Test the back-office listing endpoints."""

    async def test_plain_user_forbidden(self, async_client: AsyncClient, user_headers):
        """Plain users can't manage listings."""
        response = await async_client.post("/api/admin/properties", json=property_payload(), headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_agent_crud(self, async_client: AsyncClient, agent_headers, agent_with_user):
        """Agents create, update and delete their own listings."""
        created = await async_client.post("/api/admin/properties", json=property_payload(), headers=agent_headers)
        assert created.status_code == 201
        data = created.json()["data"]
        assert created.json()["message"] == "Property created successfully"
        assert data["slug"] == "sea-view-villa"
        assert data["purpose"] == "Sale"
        assert data["agent_id"] == agent_with_user.id

        updated = await async_client.put(
            f"/api/admin/properties/{data['id']}",
            json={"price": 425000},
            headers=agent_headers
        )
        assert updated.status_code == 200
        assert Decimal(str(updated.json()["data"]["price"])) == Decimal("425000")

        deleted = await async_client.delete(f"/api/admin/properties/{data['id']}", headers=agent_headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Property deleted successfully"

        missing = await async_client.get(f"/api/properties/{data['id']}")
        assert missing.status_code == 404

    async def test_agent_cannot_edit_others(self, async_client: AsyncClient, db_session, agent_headers):
        """Agents can't touch another agent's listing."""
        other = await AgentFactory.create_agent(db_session, name="Other Agent")
        property_obj = await PropertyFactory.create_property(db_session, agent_id=other.id)

        response = await async_client.put(
            f"/api/admin/properties/{property_obj.id}",
            json={"price": 1},
            headers=agent_headers
        )

        assert response.status_code == 403

    async def test_duplicate_titles_get_distinct_slugs(self, async_client: AsyncClient, admin_headers):
        """A second listing with the same title gets a suffixed slug."""
        first = await async_client.post("/api/admin/properties", json=property_payload(), headers=admin_headers)
        second = await async_client.post("/api/admin/properties", json=property_payload(), headers=admin_headers)

        assert first.json()["data"]["slug"] == "sea-view-villa"
        assert second.json()["data"]["slug"] == "sea-view-villa-2"

    async def test_invalid_payload(self, async_client: AsyncClient, admin_headers):
        """Non-positive prices and unknown purposes fail validation."""
        response = await async_client.post(
            "/api/admin/properties",
            json=property_payload(price=0, purpose="lease"),
            headers=admin_headers
        )

        assert response.status_code == 422

    async def test_unknown_category(self, async_client: AsyncClient, admin_headers):
        """Listings can't reference a missing category."""
        response = await async_client.post(
            "/api/admin/properties",
            json=property_payload(category_id=999),
            headers=admin_headers
        )

        assert response.status_code == 404

    async def test_image_upload_and_delete(self, async_client: AsyncClient, admin_headers, storage):
        """Uploaded images are attached in order and can be removed."""
        created = await async_client.post("/api/admin/properties", json=property_payload(), headers=admin_headers)
        property_id = created.json()["data"]["id"]

        upload = await async_client.post(
            f"/api/admin/properties/{property_id}/images",
            files=[
                ("images", ("front.png", png_bytes(), "image/png")),
                ("images", ("back.png", png_bytes(color=(0, 0, 255)), "image/png")),
            ],
            headers=admin_headers
        )

        assert upload.status_code == 201
        assert upload.json()["message"] == "2 image(s) uploaded"
        records = upload.json()["data"]["image_records"]
        assert len(records) == 2
        assert all(url.startswith("/uploads/properties/") for url in upload.json()["data"]["images"])

        deleted = await async_client.delete(
            f"/api/admin/properties/images/{records[0]['id']}",
            headers=admin_headers
        )
        assert deleted.status_code == 200

        detail = await async_client.get(f"/api/admin/properties/{property_id}", headers=admin_headers)
        assert len(detail.json()["data"]["images"]) == 1

    async def test_image_upload_rejects_non_images(self, async_client: AsyncClient, admin_headers):
        """Only image files are accepted."""
        created = await async_client.post("/api/admin/properties", json=property_payload(), headers=admin_headers)
        property_id = created.json()["data"]["id"]

        response = await async_client.post(
            f"/api/admin/properties/{property_id}/images",
            files=[("images", ("notes.txt", b"hello", "text/plain"))],
            headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    async def test_managed_list_search(self, async_client: AsyncClient, db_session, admin_headers):
        """Admins search every listing, drafts included."""
        await PropertyFactory.create_property(db_session, title="Hidden Gem", is_published=False)
        await PropertyFactory.create_property(db_session, title="Open House")

        response = await async_client.get("/api/admin/properties", params={"search": "gem"}, headers=admin_headers)

        assert response.status_code == 200
        assert [item["title"] for item in response.json()["data"]] == ["Hidden Gem"]


class TestAgentEndpoints:
    """Test the agent directory and its administration."""

    async def test_directory_with_counts(self, async_client: AsyncClient, db_session):
        """Agents are listed with their published listing counts."""
        agent = await AgentFactory.create_agent(db_session)
        await PropertyFactory.create_property(db_session, agent_id=agent.id)
        await PropertyFactory.create_property(db_session, agent_id=agent.id, is_published=False)

        response = await async_client.get("/api/agents")

        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1
        assert response.json()["data"][0]["properties_count"] == 1

    async def test_directory_filters(self, async_client: AsyncClient, db_session):
        """City and language filters narrow the directory."""
        await AgentFactory.create_agent(db_session, name="Ali", city="Hargeisa", languages="Somali")
        await AgentFactory.create_agent(db_session, name="Sarah", city="Garowe", languages="English, Arabic")

        response = await async_client.get("/api/agents", params={"language": "arabic"})

        assert [agent["name"] for agent in response.json()["data"]] == ["Sarah"]

    async def test_profile_includes_stories(self, async_client: AsyncClient, db_session, agent_with_user):
        """Profiles carry the login email and active stories."""
        await StoryFactory.create_story(db_session, agent_with_user.id, created_at=recent())

        response = await async_client.get(f"/api/agents/{agent_with_user.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "sarah@example.com"
        assert len(data["active_stories"]) == 1

    async def test_unknown_agent(self, async_client: AsyncClient):
        """Missing agents are 404."""
        response = await async_client.get("/api/agents/999")

        assert response.status_code == 404

    async def test_agent_properties(self, async_client: AsyncClient, db_session):
        """An agent's listings page shows published listings only."""
        agent = await AgentFactory.create_agent(db_session)
        published = await PropertyFactory.create_property(db_session, agent_id=agent.id)
        await PropertyFactory.create_property(db_session, agent_id=agent.id, is_published=False)

        response = await async_client.get(f"/api/agents/{agent.id}/properties")
        missing = await async_client.get("/api/agents/999/properties")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]] == [published.id]
        assert response.json()["pagination"]["total"] == 1
        assert missing.status_code == 404

    async def test_create_requires_admin(self, async_client: AsyncClient, agent_headers):
        """Only admins create agent profiles."""
        response = await async_client.post("/api/agents", json={"name": "New Agent"}, headers=agent_headers)

        assert response.status_code == 403

    async def test_admin_crud(self, async_client: AsyncClient, admin_headers):
        """Admins create, update and delete agent profiles."""
        created = await async_client.post(
            "/api/agents",
            json={"name": "Hodan Ali", "city": "Garowe", "rating": 4.5},
            headers=admin_headers
        )
        assert created.status_code == 201
        agent_id = created.json()["data"]["id"]

        updated = await async_client.put(f"/api/agents/{agent_id}", json={"city": "Bosaso"}, headers=admin_headers)
        assert updated.json()["data"]["city"] == "Bosaso"

        deleted = await async_client.delete(f"/api/agents/{agent_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert (await async_client.get(f"/api/agents/{agent_id}")).status_code == 404

    async def test_photo_upload(self, async_client: AsyncClient, db_session, admin_headers):
        """Uploaded photos become the agent's display photo."""
        agent = await AgentFactory.create_agent(db_session)

        response = await async_client.post(
            f"/api/agents/{agent.id}/photo",
            files={"photo": ("me.png", png_bytes(), "image/png")},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Photo uploaded successfully"
        assert response.json()["data"]["photo"].startswith("/uploads/agents/")

    async def test_create_account_with_temp_password(self, async_client: AsyncClient, admin_headers):
        """A temporary password is returned once and works for login."""
        response = await async_client.post(
            "/api/admin/agents",
            json={"name": "Faisal Omar", "email": "faisal@example.com", "city": "Garowe"},
            headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "faisal@example.com"
        assert data["agent"]["name"] == "Faisal Omar"
        assert data["temp_password"]

        login = await async_client.post(
            "/api/auth/login",
            json={"email": "faisal@example.com", "password": data["temp_password"]}
        )
        assert login.status_code == 200
        assert login.json()["data"]["user"]["role"] == "agent"
        assert login.json()["data"]["user"]["agent_id"] == data["agent"]["id"]

    async def test_create_account_duplicate_email(self, async_client: AsyncClient, admin_headers, plain_user):
        """Account emails must be unique."""
        response = await async_client.post(
            "/api/admin/agents",
            json={"name": "Copy", "email": "user@example.com", "password": "secret123"},
            headers=admin_headers
        )

        assert response.status_code == 409


class TestStoryEndpoints:
    """Test publishing and reading agent stories."""

    async def test_publish_from_url(self, async_client: AsyncClient, agent_headers, agent_with_user):
        """Agents publish stories that reference existing media."""
        response = await async_client.post(
            "/api/stories",
            data={"media_url": "https://cdn.example.com/tour.mp4", "media_type": "video", "duration": "90"},
            headers=agent_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Story published"
        assert body["data"]["agent_id"] == agent_with_user.id
        assert body["data"]["media_type"] == "video"
        assert body["data"]["duration"] == 30

    async def test_publish_upload(self, async_client: AsyncClient, agent_headers):
        """Uploaded files are stored and typed by their content."""
        response = await async_client.post(
            "/api/stories",
            files={"media": ("open-house.png", png_bytes(), "image/png")},
            data={"title": "Open house"},
            headers=agent_headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["media_type"] == "image"
        assert data["media_url"].startswith("/uploads/stories/")

    async def test_publish_without_media(self, async_client: AsyncClient, agent_headers):
        """A story needs a file or a URL."""
        response = await async_client.post("/api/stories", data={"title": "Empty"}, headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Provide media file or URL"

    async def test_publish_requires_agent_profile(self, async_client: AsyncClient, admin_headers):
        """Users without an agent profile can't publish."""
        response = await async_client.post(
            "/api/stories",
            data={"media_url": "https://cdn.example.com/a.jpg"},
            headers=admin_headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AGENT_PROFILE_REQUIRED"

    async def test_feed_and_grouping(self, async_client: AsyncClient, db_session):
        """The feed hides expired stories and groups the rest per agent."""
        first = await AgentFactory.create_agent(db_session, name="First")
        second = await AgentFactory.create_agent(db_session, name="Second")
        await StoryFactory.create_story(db_session, first.id, created_at=recent(60))
        await StoryFactory.create_story(db_session, second.id, created_at=recent(10))
        await StoryFactory.create_story(db_session, first.id, created_at=recent(30))
        await StoryFactory.create_story(db_session, second.id, created_at=recent(60 * 30))

        feed = await async_client.get("/api/stories")
        grouped = await async_client.get("/api/stories/grouped")

        assert len(feed.json()["data"]) == 3
        groups = grouped.json()["data"]
        assert [group["agent_id"] for group in groups] == [second.id, first.id]
        assert len(groups[1]["stories"]) == 2
        assert feed.json()["data"][0]["posted"] == "10 minutes ago"

    async def test_agent_stories(self, async_client: AsyncClient, db_session):
        """Stories can be listed for one agent."""
        agent = await AgentFactory.create_agent(db_session)
        await StoryFactory.create_story(db_session, agent.id, created_at=recent())

        response = await async_client.get(f"/api/stories/agent/{agent.id}")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    async def test_own_stories(self, async_client: AsyncClient, db_session, agent_headers, agent_with_user):
        """Agent id 0 means the caller's own profile."""
        await StoryFactory.create_story(db_session, agent_with_user.id, created_at=recent())

        response = await async_client.get("/api/stories/agent/0", headers=agent_headers)

        assert response.status_code == 200
        assert response.json()["data"][0]["agent_id"] == agent_with_user.id

    async def test_own_stories_requires_login(self, async_client: AsyncClient, user_headers):
        """Agent id 0 needs a session with an agent profile."""
        anonymous = await async_client.get("/api/stories/agent/0")
        plain = await async_client.get("/api/stories/agent/0", headers=user_headers)

        assert anonymous.status_code == 401
        assert plain.status_code == 403

    async def test_delete_own_story_only(self, async_client: AsyncClient, db_session, agent_headers, agent_with_user):
        """Agents delete their own stories and nobody else's."""
        own = await StoryFactory.create_story(db_session, agent_with_user.id, created_at=recent())
        other_agent = await AgentFactory.create_agent(db_session, name="Other")
        other = await StoryFactory.create_story(db_session, other_agent.id, created_at=recent())

        forbidden = await async_client.delete(f"/api/stories/{other.id}", headers=agent_headers)
        deleted = await async_client.delete(f"/api/stories/{own.id}", headers=agent_headers)

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Story deleted"


class TestContactEndpoints:
    """Test the contact form and its follow-up."""

    async def test_submit_and_follow_up(self, async_client: AsyncClient, admin_headers):
        """Anyone submits; staff read; admins update and delete."""
        submitted = await async_client.post(
            "/api/contacts",
            json={"name": "Hodan Ali", "email": "hodan@example.com", "message": "Is the villa available?"}
        )
        assert submitted.status_code == 201
        assert submitted.json()["message"] == "Thank you! We will get back to you shortly."
        contact_id = submitted.json()["data"]["id"]

        listed = await async_client.get("/api/contacts", params={"status": "new"}, headers=admin_headers)
        assert listed.json()["pagination"]["total"] == 1

        updated = await async_client.patch(
            f"/api/contacts/{contact_id}/status",
            json={"status": "contacted"},
            headers=admin_headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "contacted"

        deleted = await async_client.delete(f"/api/contacts/{contact_id}", headers=admin_headers)
        assert deleted.status_code == 200

    async def test_submission_validation(self, async_client: AsyncClient):
        """Blank messages and bad emails are rejected."""
        response = await async_client.post(
            "/api/contacts",
            json={"name": "Hodan", "email": "not-an-email", "message": "   "}
        )

        assert response.status_code == 422

    async def test_plain_users_cannot_read(self, async_client: AsyncClient, user_headers):
        """Contact submissions are for staff only."""
        response = await async_client.get("/api/contacts", headers=user_headers)

        assert response.status_code == 403

    async def test_agents_cannot_change_status(self, async_client: AsyncClient, db_session, agent_headers):
        """Status changes are admin only."""
        contact = await BaseRepository(Contact, db_session).create(
            {"name": "Hodan", "email": "hodan@example.com", "message": "Hi"}
        )

        response = await async_client.patch(
            f"/api/contacts/{contact.id}/status",
            json={"status": "closed"},
            headers=agent_headers
        )

        assert response.status_code == 403


class TestCatalogueEndpoints:
    """Test categories, services and new projects."""

    async def test_category_crud(self, async_client: AsyncClient, admin_headers):
        """Admins manage categories; the public sees active ones."""
        created = await async_client.post(
            "/api/categories",
            json={"name": "Residential", "slug": "residential"},
            headers=admin_headers
        )
        assert created.status_code == 201

        duplicate = await async_client.post(
            "/api/categories",
            json={"name": "Homes", "slug": "residential"},
            headers=admin_headers
        )
        assert duplicate.status_code == 409

        await async_client.post(
            "/api/categories",
            json={"name": "Archive", "slug": "archive", "is_active": False},
            headers=admin_headers
        )

        public = await async_client.get("/api/categories")
        everything = await async_client.get("/api/categories/all", headers=admin_headers)

        assert [c["slug"] for c in public.json()["data"]] == ["residential"]
        assert len(everything.json()["data"]) == 2

    async def test_category_counts(self, async_client: AsyncClient, db_session):
        """Categories report their published listing counts."""
        category = await BaseRepository(Category, db_session).create({"name": "Villas", "slug": "villas"})
        await PropertyFactory.create_property(db_session, category_id=category.id)
        await PropertyFactory.create_property(db_session, category_id=category.id, is_published=False)

        response = await async_client.get("/api/categories")

        assert response.json()["data"][0]["properties_count"] == 1

    async def test_category_toggle_and_delete(self, async_client: AsyncClient, db_session, admin_headers, user_headers):
        """Toggling flips the flag; deleting a category in use only deactivates it."""
        category = await BaseRepository(Category, db_session).create({"name": "Villas", "slug": "villas"})
        await PropertyFactory.create_property(db_session, category_id=category.id)

        forbidden = await async_client.patch(f"/api/categories/{category.id}/toggle", headers=user_headers)
        toggled = await async_client.patch(f"/api/categories/{category.id}/toggle", headers=admin_headers)
        assert forbidden.status_code == 403
        assert toggled.json()["message"] == "Category deactivated successfully"
        assert toggled.json()["data"]["is_active"] is False

        await async_client.patch(f"/api/categories/{category.id}/toggle", headers=admin_headers)
        deleted = await async_client.delete(f"/api/categories/{category.id}", headers=admin_headers)
        everything = await async_client.get("/api/categories/all", headers=admin_headers)

        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Category deactivated (has associated properties)"
        assert [(c["slug"], c["is_active"]) for c in everything.json()["data"]] == [("villas", False)]

    async def test_featured_projects(self, async_client: AsyncClient, admin_headers):
        """The featured route isn't mistaken for a project id."""
        await async_client.post(
            "/api/projects",
            json={"title": "Ocean Breeze", "location": "Lido Beach", "is_featured": True},
            headers=admin_headers
        )
        await async_client.post(
            "/api/projects",
            json={"title": "Quiet Court", "location": "Hodan"},
            headers=admin_headers
        )

        response = await async_client.get("/api/projects/featured")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["data"]] == ["Ocean Breeze"]

    async def test_invalid_category_slug(self, async_client: AsyncClient, admin_headers):
        """Slugs must be lowercase and hyphenated."""
        response = await async_client.post(
            "/api/categories",
            json={"name": "Land", "slug": "Land Plots"},
            headers=admin_headers
        )

        assert response.status_code == 422

    async def test_services(self, async_client: AsyncClient, admin_headers):
        """Inactive services are hidden from the public."""
        active = await async_client.post(
            "/api/services",
            json={"title": "Property Valuation"},
            headers=admin_headers
        )
        inactive = await async_client.post(
            "/api/services",
            json={"title": "Legal Advice", "is_active": False},
            headers=admin_headers
        )

        public = await async_client.get("/api/services")
        hidden = await async_client.get(f"/api/services/{inactive.json()['data']['id']}")

        assert active.status_code == 201
        assert [s["title"] for s in public.json()["data"]] == ["Property Valuation"]
        assert hidden.status_code == 404

    async def test_new_project_lifecycle(self, async_client: AsyncClient, admin_headers):
        """Admins create projects that the public sees once published."""
        created = await async_client.post(
            "/api/admin/projects",
            json={
                "name": "Garowe Heights",
                "developer": "Faith Developers",
                "location": "Garowe",
                "status": "Under Construction",
                "payment_plan_label": "60/40",
                "completion_percent": 40,
                "is_published": False,
                "payment_plan": [
                    {"label": "On booking", "percent": 20},
                    {"label": "During construction", "percent": 40},
                    {"label": "On handover", "percent": 40},
                ],
            },
            headers=admin_headers
        )
        assert created.status_code == 201
        project = created.json()["data"]
        assert project["slug"] == "garowe-heights"
        assert [m["label"] for m in project["payment_plan"]] == ["On booking", "During construction", "On handover"]

        hidden = await async_client.get("/api/new-projects/garowe-heights")
        assert hidden.status_code == 404

        await async_client.put(
            f"/api/admin/projects/{project['id']}",
            json={"is_published": True},
            headers=admin_headers
        )

        listed = await async_client.get("/api/new-projects", params={"paymentPlan": "60/40", "completion": 30})
        detail = await async_client.get("/api/new-projects/garowe-heights")

        assert [p["slug"] for p in listed.json()["data"]] == ["garowe-heights"]
        assert detail.status_code == 200
        assert detail.json()["data"]["tags"] == ["Off-Plan"]

    async def test_new_project_plan_over_100(self, async_client: AsyncClient, admin_headers):
        """Payment plans can't exceed the full price."""
        response = await async_client.post(
            "/api/admin/projects",
            json={
                "name": "Too Much",
                "developer": "Dev",
                "location": "Garowe",
                "payment_plan": [{"label": "A", "percent": 70}, {"label": "B", "percent": 40}],
            },
            headers=admin_headers
        )

        assert response.status_code == 422

    async def test_new_project_filters(self, async_client: AsyncClient, db_session):
        """Status filters match published projects only."""
        repo = BaseRepository(NewProject, db_session)
        await repo.create({
            "name": "Ready Towers", "slug": "ready-towers", "developer": "Dev", "location": "Bosaso",
            "status": NewProjectStatus.READY, "is_published": True
        })
        await repo.create({
            "name": "Future Park", "slug": "future-park", "developer": "Dev", "location": "Garowe",
            "status": NewProjectStatus.UNDER_CONSTRUCTION, "is_published": True
        })

        response = await async_client.get("/api/new-projects", params={"status": "Ready"})

        assert [p["slug"] for p in response.json()["data"]] == ["ready-towers"]

    async def test_admin_projects_require_admin(self, async_client: AsyncClient, agent_headers):
        """Project administration is admin only."""
        response = await async_client.get("/api/admin/projects", headers=agent_headers)

        assert response.status_code == 403
