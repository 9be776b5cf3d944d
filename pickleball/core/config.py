from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_TITLE: str = "Pickleball Tournament API"
    STORE_BACKEND: str = "memory" # "memory" or "sql"
    DATABASE_URL: str = "sqlite:///./pickleball.db"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "[%(asctime)s] [%(levelname)-7s] %(name)s: %(message)s"
    NOTIFICATION_QUEUE_SIZE: int = 256

    class Config:
        env_file = ".env"

settings = Settings()
