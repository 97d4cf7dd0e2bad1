from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class EventEnvelope(BaseModel):
    """Event payload posted by the pixel script. Every field is optional."""

    model_config = ConfigDict(extra="allow")

    timestamp: Any = None
    shop: Any = None
    eventName: Any = None
    eventData: Any = None
    customerId: Any = None
    clientId: Any = None
    url: Any = None
    userAgent: Any = None


class EventAcceptedResponse(BaseModel):
    success: bool = True
    message: str = "Event received and logged"
    eventName: Any = None


class EventRejectedResponse(BaseModel):
    success: bool = False
    message: str = "Error processing event"


class AssociatedUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    account_owner: bool | None = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class AccessTokenResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    scope: str = ""
    associated_user: AssociatedUser | None = None

    @property
    def scopes(self) -> list[str]:
        return [scope.strip() for scope in self.scope.split(",") if scope.strip()]


class OAuthErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: str
