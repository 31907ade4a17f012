"""
Client-side session holding the bearer token of the signed-in user.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Session:
    """Token and user returned by the last successful login or registration."""

    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[str]:
        return self.user.get("role")

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def start(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        self.token = token
        self.user = dict(user or {})

    def clear(self) -> None:
        self.token = None
        self.user = {}
