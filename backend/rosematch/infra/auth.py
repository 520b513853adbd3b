"""Caller identity for FastAPI endpoints.

Authentication itself is owned by the surrounding app. Requests reaching this
service carry the viewer id in ``X-User-Id``; the header is only trusted in
development and test environments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status

from rosematch.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	display_name: Optional[str] = None


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_name: Optional[str] = Header(default=None, alias="X-User-Name"),
) -> AuthenticatedUser:
	"""Resolve the calling viewer from dev headers."""
	if settings.is_dev() and x_user_id and x_user_id.strip():
		return AuthenticatedUser(id=x_user_id.strip(), display_name=x_user_name)
	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
