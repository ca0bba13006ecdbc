from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Classroom API"
    database_url: str = "sqlite:///./classroom.db"
    frontend_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    # DEV ONLY default; the auth provider shares this secret in production.
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    invite_code_length: int = 7
    seed_data_path: str = str(BASE_DIR / "db" / "seed_data.json")


settings = Settings()
