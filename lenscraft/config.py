from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./lenscraft.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    SECRET_KEY: str = "dev-secret-lenscraft"
    JWT_ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"
    CACHE_TTL: int = 300  # 5 minutes
    POPULAR_CLASSES_LIMIT: int = 6
    # "class": one cart slot per class system-wide, "class_email": one per user
    CART_SLOT_SCOPE: Literal["class", "class_email"] = "class"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
