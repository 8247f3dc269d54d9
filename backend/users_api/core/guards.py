"""
Cadena de guards para las rutas /{id}.

Cada guard es una corrutina independiente que recibe el GuardContext y devuelve
un GuardResult; run_guards los ejecuta en orden y corta en el primer fallo.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from fastapi import status
from jose import JWTError

from users_api.core.config import Settings
from users_api.core.security import decode_token

logger = logging.getLogger(__name__)


@dataclass
class GuardContext:
    raw_id: str
    authorization: str | None
    settings: Settings
    user_exists: Callable[[int], Awaitable[bool]]
    user_id: int | None = None
    claims: dict = field(default_factory=dict)


@dataclass
class GuardResult:
    passed: bool
    status_code: int = status.HTTP_200_OK
    reason: str | None = None


PASS = GuardResult(passed=True)

# máximo de un INTEGER de 64 bits con signo
MAX_ID = 2**63 - 1

Guard = Callable[[GuardContext], Awaitable[GuardResult]]


async def is_number(ctx: GuardContext) -> GuardResult:
    if not (ctx.raw_id.isascii() and ctx.raw_id.isdigit()) or int(ctx.raw_id) > MAX_ID:
        return GuardResult(False, status.HTTP_400_BAD_REQUEST, "El id debe ser un número")
    ctx.user_id = int(ctx.raw_id)
    return PASS


async def is_valid_user_by_id(ctx: GuardContext) -> GuardResult:
    if ctx.user_id is None or not await ctx.user_exists(ctx.user_id):
        return GuardResult(False, status.HTTP_404_NOT_FOUND, "User not found")
    return PASS


async def validate_token(ctx: GuardContext) -> GuardResult:
    scheme, _, token = (ctx.authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return GuardResult(False, status.HTTP_401_UNAUTHORIZED, "Token inválido o ausente")
    try:
        ctx.claims = decode_token(ctx.settings, token.strip())
    except JWTError:
        return GuardResult(False, status.HTTP_401_UNAUTHORIZED, "Token inválido o ausente")
    return PASS


async def has_permissions(ctx: GuardContext) -> GuardResult:
    if str(ctx.claims.get("sub")) != str(ctx.user_id):
        return GuardResult(False, status.HTTP_403_FORBIDDEN, "No tiene permisos para esta acción")
    return PASS


USER_BY_ID_GUARDS: tuple[Guard, ...] = (
    is_number,
    is_valid_user_by_id,
    validate_token,
    has_permissions,
)


async def run_guards(ctx: GuardContext, guards: Sequence[Guard] = USER_BY_ID_GUARDS) -> GuardResult:
    for guard in guards:
        result = await guard(ctx)
        if not result.passed:
            logger.warning("Guard %s rejected id=%s: %s", guard.__name__, ctx.raw_id, result.reason)
            return result
    return PASS
