"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./freee_notifier.db"

    # External Services
    freee_api_base: str = "https://api.freee.co.jp"
    line_api_base: str = "https://api.line.me"
    line_channel_access_token: str = ""
    line_channel_secret: str = ""
    line_liff_auth_url: str = "https://liff.line.me/"

    # Service
    service_name: str = "freee-notifier"
    log_level: str = "INFO"
    timezone: str = "Asia/Tokyo"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    line_max_retries: int = 3
    line_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Reports
    deals_limit: int = 100
    deal_url_template: str = "https://secure.freee.co.jp/reports/journals?deal_id={deal_id}&openExternalBrowser=1"
    receipt_required_items_path: str | None = None  # JSON list of {"name", "id"}


settings = Settings()
