"""Pydantic schemas for the login IP guard."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Oldest entries are dropped past this many changes
MAX_IP_HISTORY = 10

IP_CHANGE_MESSAGE = (
    "A login from a new IP address was detected. "
    "If this wasn't you, please change your password."
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IpChange(_CamelModel):
    """One detected IP change."""

    old_ip: str
    new_ip: str
    at: datetime


class IpSecurityRecord(_CamelModel):
    """Per-user IP state. Created on the first check, never deleted here."""

    registered_ip: str
    last_login_ip: str
    last_login_at: datetime
    change_history: list[IpChange] = Field(default_factory=list)

    def with_change(self, new_ip: str, at: datetime) -> "IpSecurityRecord":
        """Record a move from ``last_login_ip`` to ``new_ip``, keeping the last 10 changes."""
        change = IpChange(old_ip=self.last_login_ip, new_ip=new_ip, at=at)
        history = [*self.change_history, change][-MAX_IP_HISTORY:]
        return self.model_copy(
            update={
                "last_login_ip": new_ip,
                "last_login_at": at,
                "change_history": history,
            }
        )

    def knows(self, ip: str) -> bool:
        """True if ``ip`` is the registered or the last-seen address."""
        return ip in (self.last_login_ip, self.registered_ip)


class IpWarning(_CamelModel):
    """Shown to the user after an IP change."""

    message: str
    old_ip: str
    new_ip: str


class IpCheckResult(_CamelModel):
    """Outcome of a login IP check. ``success`` is False when the check itself failed."""

    success: bool = True
    ip_changed: bool = False
    warning: Optional[IpWarning] = None
    error: Optional[str] = None
