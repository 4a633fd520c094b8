from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    firebase_credentials_path: str = ""
    project_id: str = ""
    log_level: str = "INFO"
    # Search
    default_radius_km: float = 10.0
    max_radius_km: float = 500.0
    default_page_size: int = 10
    max_page_size: int = 50
    # Contact masking
    mask_pattern: str = "##XXX-XXX##"
    unmask_token_ttl_minutes: int = 30
    max_unmask_token_ttl_minutes: int = 1440
    unmask_token_secret: str = "dev-unmask-secret-change-me"
    active_booking_statuses: list[str] = ["CONFIRMED", "IN_PROGRESS"]
    # Geocoding
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "LabourNow/1.0"
    nominatim_country_codes: str = "in"
    geocoding_timeout_seconds: float = 10.0

    model_config = {"env_prefix": "LABOURNOW_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
