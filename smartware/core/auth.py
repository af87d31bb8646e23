# smartware/core/auth.py

from enum import Enum

from fastapi import Depends, Header, HTTPException, Request, status

from smartware.core.ledger import Ledger


class Role(str, Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


def get_current_role(x_role: str = Header(default=Role.ADMIN.value)) -> Role:
    try:
        return Role(x_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {x_role}",
        )


def get_admin_role(
    role: Role = Depends(get_current_role),
) -> Role:
    # Prices, costs and valuations are admin-only
    if role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return role


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger
