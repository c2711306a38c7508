from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from src.domain.common import Role
from src.domain.entities import Identity
from src.infrastructure.persistence.database import get_unit_of_work


async def get_current_identity(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Identity:
    """Identity forwarded by the authentication gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized to access this route")
    try:
        role = Role((x_user_role or Role.USER.value).lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Role {x_user_role} is not recognized")
    return Identity(user_id=x_user_id.strip(), role=role)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role {identity.role.value} is not authorized to access this route",
        )
    return identity


__all__ = ["get_current_identity", "require_admin", "get_unit_of_work"]
