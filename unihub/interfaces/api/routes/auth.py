"""Session related endpoints."""

from fastapi import APIRouter

from unihub.infrastructure.notifications import presence_registry
from unihub.interfaces.api.schemas import OnlineUsersRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/online-users", response_model=OnlineUsersRead)
def list_online_users() -> OnlineUsersRead:
    """Return the identifiers of users with at least one live connection."""

    return OnlineUsersRead(user_ids=sorted(presence_registry.list_online()))
