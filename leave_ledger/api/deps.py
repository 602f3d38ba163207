# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from leave_ledger.exceptions import AppError
from leave_ledger.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if auth.role != "admin":
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
