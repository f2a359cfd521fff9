from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, OPENAI_ENDPOINT, OPENAI_DEPLOYMENT_NAME).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Management"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "expenses.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    seed_sample_expenses: bool = True

    # Demo identity (no authentication)
    default_currency: str = "GBP"
    default_user_id: int = 1
    default_reviewer_id: int = 2

    # Hosted chat model (Azure OpenAI). Chat runs in demo mode unless both
    # endpoint and deployment name are set.
    openai_endpoint: Optional[str] = None
    openai_deployment_name: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_api_version: str = "2024-10-21"
    managed_identity_client_id: Optional[str] = None

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.default_currency = self.default_currency.upper()

    @property
    def chat_configured(self) -> bool:
        return bool(self.openai_endpoint) and bool(self.openai_deployment_name)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
