import os

from dotenv import load_dotenv


def load_env() -> None:
    load_dotenv()


def get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise EnvironmentError(f"Missing required environment variable: {name}")
    return value


def is_confirmation_required() -> bool:
    value = os.getenv("ROAM_REQUIRE_CONFIRMATION", "")
    return value.strip().lower() in {"true", "1", "yes"}
