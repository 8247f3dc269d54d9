from pydantic import BaseModel
from dotenv import load_dotenv
import os


load_dotenv()


class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./database.sqlite")
    api_title: str = os.getenv("API_TITLE", "Users API")
    jwt_secret: str = os.getenv("JWT_SECRET", "change_me")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    allowed_origins: list[str] = ["*"]

    def __init__(self, **data):
        super().__init__(**data)
        cors = os.getenv("ALLOWED_ORIGINS", "")
        if cors and "allowed_origins" not in data:
            self.allowed_origins = [x.strip() for x in cors.split(",") if x.strip()]


settings = Settings()
