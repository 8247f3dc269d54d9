import logging
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from users_api.core.errors import ConflictError, InternalError, ServiceError, ServiceResult, ValidationError
from users_api.core.security import hash_password, password_too_long, verify_password
from users_api.db.session import Database
from users_api.models.users import User
from users_api.services.filters import build_user_filters

logger = logging.getLogger(__name__)

PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
USER_ALREADY_EXISTS = "User already exists"
PASSWORD_TOO_LONG = "Password cannot be longer than 72 bytes"


class BulkUserPayload(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    password_second: str | None = None
    cellphone: str
    status: bool = True


def serialize_user(user: User | None) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "cellphone": user.cellphone,
        "status": user.status,
        "createdAt": user.created_at.isoformat() if isinstance(user.created_at, datetime) else None,
        "updatedAt": user.updated_at.isoformat() if isinstance(user.updated_at, datetime) else None,
    }


class UserService:
    """Operaciones de negocio sobre usuarios. Recibe el handle del store al arrancar."""

    def __init__(self, database: Database, bcrypt_rounds: int = 10):
        self.database = database
        self.bcrypt_rounds = bcrypt_rounds

    def _hash(self, raw: str) -> str:
        return hash_password(raw, rounds=self.bcrypt_rounds)

    # ————— create —————
    async def create_user(
        self, *, name: str, email: str, password: str, password_second: str, cellphone: str
    ) -> ServiceResult:
        try:
            if password != password_second:
                raise ValidationError(PASSWORDS_DO_NOT_MATCH)
            if password_too_long(password):
                raise ValidationError(PASSWORD_TOO_LONG)

            async with self.database.session() as db:
                existing = await db.execute(select(User.id).where(User.email == email))
                if existing.scalar_one_or_none() is not None:
                    raise ConflictError(USER_ALREADY_EXISTS)

                user = User(
                    name=name,
                    email=email,
                    password=self._hash(password),
                    cellphone=cellphone,
                    status=True,
                )
                db.add(user)
                try:
                    await db.commit()
                except IntegrityError as exc:
                    await db.rollback()
                    raise ConflictError(USER_ALREADY_EXISTS) from exc
                await db.refresh(user)
        except ServiceError as exc:
            logger.info("Create rejected for %s: %s", email, exc.message)
            return exc.to_result()

        logger.info("User created with id %s", user.id)
        return ServiceResult(code=200, message=f"User created successfully with ID: {user.id}")

    # ————— bulk create —————
    async def _create_from_payload(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            raise ValidationError("El usuario debe ser un objeto.")
        try:
            data = BulkUserPayload.model_validate(payload)
        except SchemaError as exc:
            raise ValidationError("El usuario debe tener nombre, email y contraseña.") from exc
        if data.password != data.password_second:
            raise ValidationError("Las contraseñas no coinciden")
        if password_too_long(data.password):
            raise ValidationError(PASSWORD_TOO_LONG)

        async with self.database.session() as db:
            db.add(
                User(
                    name=data.name,
                    email=data.email,
                    password=self._hash(data.password),
                    status=data.status,
                    cellphone=data.cellphone,
                )
            )
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise ConflictError(USER_ALREADY_EXISTS) from exc

    async def bulk_create_users(self, users_list: Any) -> dict:
        if not isinstance(users_list, list):
            raise ValidationError("La lista de usuarios no es un array válido.")

        success_count = 0
        error_count = 0
        error_users: list[Any] = []

        for payload in users_list:
            try:
                await self._create_from_payload(payload)
            except (ServiceError, SQLAlchemyError, ValueError) as exc:
                error_count += 1
                error_users.append(payload)
                name = payload.get("name") if isinstance(payload, dict) else None
                logger.warning("Error al crear usuario %s: %s", name, exc)
                continue
            success_count += 1

        return {
            "successCount": success_count,
            "errorCount": error_count,
            "errorUsers": error_users,
        }

    # ————— read —————
    async def get_all_users(self) -> ServiceResult:
        try:
            async with self.database.session() as db:
                result = await db.execute(select(User).where(User.status.is_(True)).order_by(User.id))
                users = result.scalars().all()
        except SQLAlchemyError:
            logger.error("Error buscando a los usuarios", exc_info=True)
            return InternalError("No se pudo traer los usuarios en la base de datos").to_result()
        return ServiceResult(code=200, message=[serialize_user(u) for u in users])

    async def find_active_user(self, user_id: int) -> User | None:
        async with self.database.session() as db:
            result = await db.execute(select(User).where(User.id == user_id, User.status.is_(True)))
            return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> ServiceResult:
        return ServiceResult(code=200, message=serialize_user(await self.find_active_user(user_id)))

    async def find_users(self, params: Mapping[str, str]) -> ServiceResult:
        conditions = build_user_filters(params)
        async with self.database.session() as db:
            result = await db.execute(select(User).where(*conditions).order_by(User.id))
            users = result.scalars().all()
        return ServiceResult(code=200, message=[serialize_user(u) for u in users])

    # ————— update / delete —————
    async def update_user(self, user_id: int, body: Mapping[str, Any]) -> ServiceResult:
        current = await self.find_active_user(user_id)

        values: dict[str, Any] = {}
        name = body.get("name")
        if name is not None:
            values["name"] = name
        elif current is not None:
            values["name"] = current.name

        password = body.get("password")
        if password:
            if password_too_long(password):
                return ValidationError(PASSWORD_TOO_LONG).to_result()
            values["password"] = self._hash(password)
        elif current is not None:
            values["password"] = current.password

        cellphone = body.get("cellphone")
        if cellphone is not None:
            values["cellphone"] = cellphone
        elif current is not None:
            values["cellphone"] = current.cellphone

        if values:
            async with self.database.session() as db:
                await db.execute(update(User).where(User.id == user_id).values(**values))
                await db.commit()

        return ServiceResult(code=200, message="User updated successfully")

    async def delete_user(self, user_id: int) -> ServiceResult:
        async with self.database.session() as db:
            await db.execute(update(User).where(User.id == user_id).values(status=False))
            await db.commit()
        return ServiceResult(code=200, message="User deleted successfully")

    # ————— auth —————
    async def authenticate(self, email: str, password: str) -> User | None:
        async with self.database.session() as db:
            result = await db.execute(select(User).where(User.email == email, User.status.is_(True)))
            user = result.scalar_one_or_none()
        if not user or not verify_password(password, user.password):
            return None
        return user
