import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from users_api.core.deps import get_user_service, guarded_user_id
from users_api.core.errors import ServiceResult
from users_api.services.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


class UserCreateSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=255)
    password_second: str = Field(..., max_length=255)
    cellphone: str = Field(..., min_length=1, max_length=50)


class UserUpdateSchema(BaseModel):
    name: str | None = Field(None, max_length=150)
    password: str | None = Field(None, max_length=255)
    cellphone: str | None = Field(None, min_length=1, max_length=50)


def to_response(result: ServiceResult) -> JSONResponse:
    return JSONResponse(status_code=result.code, content=result.message)


@router.post("/create")
async def create_user(payload: UserCreateSchema, service: UserService = Depends(get_user_service)):
    result = await service.create_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        password_second=payload.password_second,
        cellphone=payload.cellphone,
    )
    return to_response(result)


@router.get("/getAllUsers")
async def get_all_users(service: UserService = Depends(get_user_service)):
    return to_response(await service.get_all_users())


@router.get("/findUsers")
async def find_users(request: Request, service: UserService = Depends(get_user_service)):
    try:
        result = await service.find_users(dict(request.query_params))
    except Exception:
        logger.error("Error al buscar usuarios", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error interno del servidor"},
        )
    return to_response(result)


@router.post("/bulkCreate")
async def bulk_create(usuarios: Any = Body(None), service: UserService = Depends(get_user_service)):
    try:
        result = await service.bulk_create_users(usuarios)
    except Exception:
        logger.error("Error al crear usuarios", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error al crear usuarios"},
        )
    return result


@router.get("/{user_id}")
async def get_user(target_id: int = Depends(guarded_user_id), service: UserService = Depends(get_user_service)):
    return to_response(await service.get_user_by_id(target_id))


@router.put("/{user_id}")
async def update_user(
    payload: UserUpdateSchema,
    target_id: int = Depends(guarded_user_id),
    service: UserService = Depends(get_user_service),
):
    return to_response(await service.update_user(target_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{user_id}")
async def delete_user(target_id: int = Depends(guarded_user_id), service: UserService = Depends(get_user_service)):
    return to_response(await service.delete_user(target_id))
