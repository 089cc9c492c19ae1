from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = Field(default="Cafe POS", alias="APP_NAME")
    app_env: str = Field(default="dev", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    database_url: str = Field(default="sqlite:///./cafe.db", alias="DATABASE_URL")
    store_backend: str = Field(default="sql", alias="STORE_BACKEND")  # sql | memory
    store_name: str = Field(default="Main Branch", alias="STORE_NAME")
    currency: str = Field(default="PHP", alias="CURRENCY")
    page_size: int = Field(default=5, alias="PAGE_SIZE")
    audit_file: str = Field(default="data/order_audit.jsonl", alias="AUDIT_FILE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    idempotency_ttl: int = Field(default=3600, alias="IDEMPOTENCY_TTL")

    class Config:
        env_file = ".env"


settings = Settings()
