from fastapi import Depends, Header, HTTPException, Request

from users_api.core.config import Settings
from users_api.core.guards import GuardContext, run_guards
from users_api.services.users import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


async def guarded_user_id(
    user_id: str,
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    service: UserService = Depends(get_user_service),
) -> int:
    async def user_exists(candidate: int) -> bool:
        return await service.find_active_user(candidate) is not None

    ctx = GuardContext(
        raw_id=user_id,
        authorization=authorization,
        settings=settings,
        user_exists=user_exists,
    )
    result = await run_guards(ctx)
    if not result.passed:
        raise HTTPException(status_code=result.status_code, detail=result.reason)
    return ctx.user_id
