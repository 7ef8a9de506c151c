from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./roam.db"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_S: float = 30.0
    DEFAULT_TIMEZONE: str = "America/Santo_Domingo"
    HISTORY_LIMIT: int = 10
    SEARCH_LIMIT: int = 10


settings = Settings()
