"""
Async HTTP client for the marketplace API.

Every response is expected in the ``{success, data, message}`` envelope.
Any non-2xx status raises ``ApiClientError``; a 401 also signs the session out.
A 2xx body that is not an envelope raises too.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import httpx

from app.client.session import Session
from app.utils.filters import (
    PropertyFilters,
    AgentFilters,
    NewProjectFilters,
    build_query_params
)

logger = logging.getLogger(__name__)

# (filename, content, content_type)
UploadSpec = Tuple[str, bytes, str]
Params = Union[Dict[str, Any], List[Tuple[str, Any]], None]


class ApiClientError(Exception):
    """Raised for every non-2xx response."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


def error_message(payload: Any, default: str) -> str:
    """
    Pick the human-readable message out of an error body.

    Looks at ``message``, then ``error`` (a string or an object with a
    ``message``), then ``detail``.
    """
    if not isinstance(payload, dict):
        return default
    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    error = payload.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    detail = payload.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if detail:
        return str(detail)
    return default


def _clean_params(params: Params) -> Params:
    if isinstance(params, dict):
        return {key: value for key, value in params.items() if value is not None}
    return params


class _Resource:
    def __init__(self, client: "MarketplaceClient"):
        self._client = client


class AuthAPI(_Resource):
    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        data = await self._client.post("/auth/register", json={"name": name, "email": email, "password": password})
        self._client.session.start(data["token"], data.get("user"))
        return data

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._client.post("/auth/login", json={"email": email, "password": password})
        self._client.session.start(data["token"], data.get("user"))
        return data

    async def me(self) -> Dict[str, Any]:
        user = await self._client.get("/auth/me")
        self._client.session.user = dict(user)
        return user

    async def logout(self) -> None:
        """End the session; the local token is dropped even if the server call fails."""
        try:
            if self._client.session.is_authenticated:
                await self._client.post("/auth/logout")
        finally:
            self._client.session.clear()

    async def forgot_password(self, email: str) -> str:
        envelope = await self._client.request("POST", "/auth/forgot-password", json={"email": email})
        return envelope.get("message", "")

    async def reset_password(self, token: str, password: str) -> str:
        envelope = await self._client.request(
            "POST", "/auth/reset-password", json={"token": token, "password": password}
        )
        return envelope.get("message", "")


class PropertiesAPI(_Resource):
    async def list(
        self,
        filters: Optional[PropertyFilters] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Search listings; returns the items and the pagination block."""
        params = build_query_params(filters) if filters else []
        params += [(key, value) for key, value in (("page", page), ("limit", limit)) if value is not None]
        envelope = await self._client.request("GET", "/properties", params=params)
        return envelope.get("data") or [], envelope.get("pagination") or {}

    async def featured(self, limit: int = 6) -> List[Dict[str, Any]]:
        return await self._client.get("/properties/featured", params={"limit": limit})

    async def get(self, slug_or_id: Union[str, int]) -> Dict[str, Any]:
        return await self._client.get(f"/properties/{slug_or_id}")

    # Back office

    async def list_managed(
        self,
        search: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        envelope = await self._client.request(
            "GET", "/admin/properties", params={"search": search, "page": page, "limit": limit}
        )
        return envelope.get("data") or [], envelope.get("pagination") or {}

    async def get_managed(self, property_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/admin/properties/{property_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/admin/properties", json=data)

    async def update(self, property_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/admin/properties/{property_id}", json=data)

    async def delete(self, property_id: int) -> None:
        await self._client.delete(f"/admin/properties/{property_id}")

    async def upload_images(self, property_id: int, images: Sequence[UploadSpec]) -> Dict[str, Any]:
        files = [("images", image) for image in images]
        return await self._client.post(f"/admin/properties/{property_id}/images", files=files)

    async def delete_image(self, image_id: int) -> None:
        await self._client.delete(f"/admin/properties/images/{image_id}")


class AgentsAPI(_Resource):
    async def list(
        self,
        filters: Optional[AgentFilters] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        params = build_query_params(filters) if filters else []
        params += [(key, value) for key, value in (("page", page), ("limit", limit)) if value is not None]
        envelope = await self._client.request("GET", "/agents", params=params)
        return envelope.get("data") or [], envelope.get("pagination") or {}

    async def get(self, agent_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/agents/{agent_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/agents", json=data)

    async def create_with_account(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create an agent and its login; the result carries ``temp_password`` when one was generated."""
        return await self._client.post("/admin/agents", json=data)

    async def update(self, agent_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/agents/{agent_id}", json=data)

    async def delete(self, agent_id: int) -> None:
        await self._client.delete(f"/agents/{agent_id}")

    async def upload_photo(self, agent_id: int, photo: UploadSpec) -> Dict[str, Any]:
        return await self._client.post(f"/agents/{agent_id}/photo", files={"photo": photo})

    async def properties(
        self,
        agent_id: int,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """An agent's published listings and the pagination block."""
        envelope = await self._client.request(
            "GET", f"/agents/{agent_id}/properties", params={"page": page, "limit": limit}
        )
        return envelope.get("data") or [], envelope.get("pagination") or {}


class CategoriesAPI(_Resource):
    async def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return await self._client.get("/categories/all" if include_inactive else "/categories")

    async def get(self, category_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/categories/{category_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/categories", json=data)

    async def update(self, category_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/categories/{category_id}", json=data)

    async def toggle(self, category_id: int) -> Dict[str, Any]:
        return await self._client.patch(f"/categories/{category_id}/toggle")

    async def delete(self, category_id: int) -> None:
        await self._client.delete(f"/categories/{category_id}")


class ServicesAPI(_Resource):
    async def list(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return await self._client.get("/services/all" if include_inactive else "/services")

    async def get(self, service_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/services/{service_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/services", json=data)

    async def update(self, service_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/services/{service_id}", json=data)

    async def delete(self, service_id: int) -> None:
        await self._client.delete(f"/services/{service_id}")


class ContactsAPI(_Resource):
    async def submit(self, data: Dict[str, Any]) -> int:
        """Send the contact form; returns the new submission id."""
        created = await self._client.post("/contacts", json=data)
        return created["id"]

    async def list(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        envelope = await self._client.request(
            "GET", "/contacts", params={"status": status, "page": page, "limit": limit}
        )
        return envelope.get("data") or [], envelope.get("pagination") or {}

    async def get(self, contact_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/contacts/{contact_id}")

    async def update_status(self, contact_id: int, status: str) -> Dict[str, Any]:
        return await self._client.patch(f"/contacts/{contact_id}/status", json={"status": status})

    async def delete(self, contact_id: int) -> None:
        await self._client.delete(f"/contacts/{contact_id}")


class ProjectsAPI(_Resource):
    async def list(self, page: int = 1, limit: Optional[int] = None, **filters: Any) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """List projects; ``filters`` are sent as-is (location, status, minPrice, maxPrice, featured)."""
        envelope = await self._client.request("GET", "/projects", params={**filters, "page": page, "limit": limit})
        return envelope.get("data") or [], envelope.get("pagination") or {}

    async def featured(self) -> List[Dict[str, Any]]:
        return await self._client.get("/projects/featured")

    async def get(self, project_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/projects/{project_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/projects", json=data)

    async def update(self, project_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/projects/{project_id}", json=data)

    async def delete(self, project_id: int) -> None:
        await self._client.delete(f"/projects/{project_id}")


class NewProjectsAPI(_Resource):
    async def list(self, filters: Optional[NewProjectFilters] = None) -> List[Dict[str, Any]]:
        return await self._client.get("/new-projects", params=build_query_params(filters) if filters else None)

    async def get(self, slug: str) -> Dict[str, Any]:
        return await self._client.get(f"/new-projects/{slug}")

    # Administration

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._client.get("/admin/projects")

    async def get_by_id(self, project_id: int) -> Dict[str, Any]:
        return await self._client.get(f"/admin/projects/{project_id}")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.post("/admin/projects", json=data)

    async def update(self, project_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.put(f"/admin/projects/{project_id}", json=data)

    async def delete(self, project_id: int) -> None:
        await self._client.delete(f"/admin/projects/{project_id}")

    async def upload_images(self, project_id: int, images: Sequence[UploadSpec]) -> Dict[str, Any]:
        files = [("images", image) for image in images]
        return await self._client.post(f"/admin/projects/{project_id}/images", files=files)

    async def delete_image(self, image_id: int) -> None:
        await self._client.delete(f"/admin/projects/images/{image_id}")


class StoriesAPI(_Resource):
    async def list(self) -> List[Dict[str, Any]]:
        return await self._client.get("/stories")

    async def grouped(self) -> List[Dict[str, Any]]:
        return await self._client.get("/stories/grouped")

    async def for_agent(self, agent_id: int = 0) -> List[Dict[str, Any]]:
        """Stories of one agent; ``0`` means the signed-in agent."""
        return await self._client.get(f"/stories/agent/{agent_id}")

    async def create(
        self,
        media: Optional[UploadSpec] = None,
        media_url: Optional[str] = None,
        **fields: Any
    ) -> Dict[str, Any]:
        """
        Publish a story from an uploaded file or an existing media URL.

        Args:
            media: File to upload
            media_url: Existing media URL, used when no file is given
            fields: title, project_name, caption, duration, media_type, thumbnail_url
        """
        form = {key: str(value) for key, value in fields.items() if value is not None}
        if media_url:
            form["media_url"] = media_url
        files = {"media": media} if media else None
        return await self._client.post("/stories", data=form, files=files)

    async def delete(self, story_id: int) -> None:
        await self._client.delete(f"/stories/{story_id}")


class MarketplaceClient:
    """
    Client for the marketplace API.

    Resource groups hang off the client (``client.properties.list(...)``).
    The bearer token lives in an explicit ``Session``; pass one in to share
    it between clients.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        session: Optional[Session] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or Session()
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

        self.auth = AuthAPI(self)
        self.properties = PropertiesAPI(self)
        self.agents = AgentsAPI(self)
        self.categories = CategoriesAPI(self)
        self.services = ServicesAPI(self)
        self.contacts = ContactsAPI(self)
        self.projects = ProjectsAPI(self)
        self.new_projects = NewProjectsAPI(self)
        self.stories = StoriesAPI(self)

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Params = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Any = None
    ) -> Dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        Raises:
            ApiClientError: For any non-2xx response or a malformed envelope
        """
        response = await self._http.request(
            method,
            path,
            params=_clean_params(params),
            json=json,
            data=data,
            files=files,
            headers=self.session.auth_headers()
        )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success:
            if not isinstance(payload, dict) or "success" not in payload:
                logger.warning(f"{method} {path} returned a malformed envelope")
                raise ApiClientError(response.status_code, "Malformed response envelope", payload)
            return payload

        if response.status_code == 401:
            self.session.clear()
        message = error_message(payload, response.reason_phrase or "Request failed")
        logger.warning(f"{method} {path} failed: {response.status_code} {message}")
        raise ApiClientError(response.status_code, message, payload)

    async def get(self, path: str, params: Params = None) -> Any:
        return (await self.request("GET", path, params=params)).get("data")

    async def post(self, path: str, json: Any = None, data: Optional[Dict[str, Any]] = None, files: Any = None) -> Any:
        return (await self.request("POST", path, json=json, data=data, files=files)).get("data")

    async def put(self, path: str, json: Any = None) -> Any:
        return (await self.request("PUT", path, json=json)).get("data")

    async def patch(self, path: str, json: Any = None) -> Any:
        return (await self.request("PATCH", path, json=json)).get("data")

    async def delete(self, path: str) -> Any:
        return (await self.request("DELETE", path)).get("data")


__all__ = [
    "ApiClientError",
    "MarketplaceClient",
    "error_message",
]
