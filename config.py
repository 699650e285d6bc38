import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Database Settings
    database_file: str = os.getenv("LIBRARY_DB_FILE", "library.db")

    # Application Settings
    app_name: str = os.getenv("APP_NAME", "Library Management System")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    @property
    def effective_log_level(self) -> str:
        """DEBUG=true always wins over LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level


settings = Settings()
