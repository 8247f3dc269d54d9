from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from users_api.core.config import Settings
from users_api.core.security import create_access_token
from users_api.core.deps import get_settings, get_user_service
from users_api.services.users import UserService

router = APIRouter(tags=["auth"])


class UserLoginSchema(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


@router.post("/login")
async def login(
    payload: UserLoginSchema,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    user = await service.authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")

    token = create_access_token(settings, sub=str(user.id))
    return {"access_token": token, "token_type": "bearer", "user_id": user.id}
