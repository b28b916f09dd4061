from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DB_PATH: Path = Path.home() / "bloodlink.db"
    # JSON API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8080

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path(__file__).resolve().parent / "logs"

    # Insert demo donors/hospitals on first start (empty store only)
    SEED_DEMO_DATA: bool = True
    DEFAULT_LEADERBOARD_LIMIT: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
