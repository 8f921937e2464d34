"""Data models for VVCode authentication"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class AuthSession:
    """Transient PKCE session kept between the login request and its callback

    Attributes:
        state: CSRF token echoed back by the login page
        code_verifier: Secret whose S256 challenge was sent with the request
    """
    state: str
    code_verifier: str


@dataclass
class AuthInfo:
    """Result of a successful code exchange

    Attributes:
        access_token: Bearer token for the VVCode API
        user_id: Numeric VVCode account id
    """
    access_token: str
    user_id: int


@dataclass
class AuthState:
    """Status payload broadcast to subscribers"""
    user: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.user is None:
            return {}
        return {"user": self.user}


class AuthPhase(str, Enum):
    """Where the service is in the login flow"""
    UNAUTHENTICATED = "unauthenticated"
    PENDING_CALLBACK = "pending_callback"
    PROCESSING_CALLBACK = "processing_callback"
    AUTHENTICATED = "authenticated"


class GroupItem(BaseModel):
    """One switchable bundle of API key, default model and base URL"""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    name: Optional[str] = None
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    default_model_id: Optional[str] = Field(default=None, alias="defaultModelId")
    api_base_url: Optional[str] = Field(default=None, alias="apiBaseUrl")
    is_default: bool = Field(default=False, alias="isDefault")

    def to_state(self) -> Dict[str, Any]:
        """Serialize with the backend's camelCase field names"""
        return self.model_dump(by_alias=True)


GroupConfig = List[GroupItem]


def parse_group_config(raw: Any) -> GroupConfig:
    """Build a GroupConfig from a JSON list (as returned or as persisted)"""
    if not raw:
        return []
    return [GroupItem.model_validate(item) for item in raw]


def dump_group_config(groups: GroupConfig) -> List[Dict[str, Any]]:
    return [group.to_state() for group in groups]
