# salon/routers/users_routes.py

from fastapi import APIRouter, Depends

from salon.auth import get_current_user
from salon.schemas import Provider, ProviderPublic

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=ProviderPublic)
def me(current_user: Provider = Depends(get_current_user)):
    return {
        "id": current_user.id,
        "username": current_user.username,
        "name": current_user.name,
        "role": current_user.role,
    }
