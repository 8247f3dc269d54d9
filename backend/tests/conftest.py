"""
Fixtures compartidos para las pruebas con pytest.
Cada prueba levanta la app contra una base SQLite temporal y propia.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from users_api.core.config import Settings
from users_api.main import create_app
from users_api.models.users import User

TEST_PASSWORD = "password123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        allowed_origins=["*"],
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def service(client):
    return client.app.state.user_service


@pytest.fixture
def run(client):
    """Ejecuta una corrutina en el mismo event loop que usa la app."""

    def _run(fn, *args, **kwargs):
        return client.portal.call(lambda: fn(*args, **kwargs))

    return _run


@pytest.fixture
def fetch_row(service, run):
    """Lee la fila cruda (incluye status=false y el hash de la contraseña)."""

    async def _fetch(email: str):
        async with service.database.session() as db:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    return lambda email: run(_fetch, email)


def user_payload(name: str, email: str, **overrides) -> dict:
    payload = {
        "name": name,
        "email": email,
        "password": TEST_PASSWORD,
        "password_second": TEST_PASSWORD,
        "cellphone": "987654321",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_user(client):
    """Crea un usuario vía /create y devuelve su id."""

    def _create(name: str, email: str, **overrides) -> int:
        r = client.post("/api/users/create", json=user_payload(name, email, **overrides))
        assert r.status_code == 200, f"Alta fallida: {r.status_code} {r.text}"
        return int(r.json().rsplit(":", 1)[1])

    return _create


@pytest.fixture
def auth_headers(client):
    """Inicia sesión y devuelve las cabeceras Bearer."""

    def _headers(email: str, password: str = TEST_PASSWORD) -> dict:
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, f"Login fallido: {r.status_code} {r.text}"
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _headers
