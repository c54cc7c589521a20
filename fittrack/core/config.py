from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./fittrack.db"

    secret_key: str = "change-me"
    access_token_expire_minutes: int = 12 * 60

    # используется, когда у пользователя не задан свой часовой пояс
    default_timezone: str = "UTC"

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    # n8n webhooks; пустое значение = workflow не настроен
    n8n_onboarding_webhook_url: Optional[str] = None
    n8n_meal_log_webhook_url: Optional[str] = None
    n8n_recommendations_webhook_url: Optional[str] = None
    n8n_ai_recommendations_webhook_url: Optional[str] = None
    n8n_chat_webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0

    openfoodfacts_api_base: str = "https://world.openfoodfacts.org/api/v2"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
