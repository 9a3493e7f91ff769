"""Role listing and an admin-only example endpoint."""

from fastapi import APIRouter

from streamgate.api.deps import AdminDep, StoreDep
from streamgate.schemas.roles import AdminOnlyResponse, RoleItem

router = APIRouter()


@router.get("", response_model=list[RoleItem])
def list_roles(store: StoreDep) -> list[RoleItem]:
    """All available roles."""
    return [RoleItem.model_validate(r) for r in store.list_roles()]


@router.get("/admin-only", response_model=AdminOnlyResponse)
def admin_only(_admin: AdminDep, store: StoreDep) -> AdminOnlyResponse:
    """Example of a route gated by the role guard (admin only, 403 otherwise)."""
    return AdminOnlyResponse(
        message="This endpoint is only accessible by admins",
        roles=[RoleItem.model_validate(r) for r in store.list_roles()],
    )
