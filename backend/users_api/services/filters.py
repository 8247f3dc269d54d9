from datetime import datetime, timezone
from typing import Mapping

from sqlalchemy import ColumnElement

from users_api.models.users import User

STATUS_PARAM = "status"
NAME_PARAM = "name"
CREATED_BEFORE_PARAM = "fechaInicioAntes"
CREATED_AFTER_PARAM = "fechaInicioDespues"


def parse_filter_date(value: str) -> datetime:
    """Convierte '2024/01/15' o '2024-01-15[T..]' en datetime. Lanza ValueError si no es fecha."""
    normalized = value.strip().replace("/", "-")
    try:
        return datetime.strptime(normalized, "%Y-%m-%d")
    except ValueError:
        parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def build_user_filters(params: Mapping[str, str]) -> list[ColumnElement[bool]]:
    """
    Traduce los query params de /findUsers a condiciones sobre User.

    Cada condición ocupa un "slot" por columna; las fechas comparten el slot de
    created_at, así que si llegan ambas solo queda la de fechaInicioDespues.
    """
    slots: dict[str, ColumnElement[bool]] = {"status": User.status.is_(True)}

    if params.get(STATUS_PARAM) is not None:
        slots["status"] = User.status.is_(params[STATUS_PARAM] == "true")

    name = params.get(NAME_PARAM)
    if name:
        slots["name"] = User.name.contains(name, autoescape=True)

    before = params.get(CREATED_BEFORE_PARAM)
    if before:
        slots["created_at"] = User.created_at < parse_filter_date(before)

    after = params.get(CREATED_AFTER_PARAM)
    if after:
        slots["created_at"] = User.created_at > parse_filter_date(after)

    return list(slots.values())
