from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DATABASE_URL: str | None = None
    JWT_SECRET: str | None = None
    JWT_EXPIRY_DAYS: int = 7
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # Application URLs
    APP_BASE_URL: str = "http://localhost:8001"  # Default for development

    # Supabase storage for shipping labels
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    LABELS_BUCKET: str = "shipping-labels"

    # DTDC courier configuration
    DTDC_API_KEY: str | None = None
    DTDC_CUSTOMER_CODE: str | None = None
    DTDC_SERVICE_TYPE: str = "GROUND EXPRESS"
    DTDC_COMMODITY_ID: str = "99"
    DTDC_TRACKING_ACCESS_TOKEN: str | None = None
    DTDC_BASE_URL: str = "https://pxapi.dtdc.in"
    DTDC_TRACKING_URL: str = (
        "https://blktracksvc.dtdc.com/dtdc-api/rest/JSONCnTrk/getTrackDetails"
    )
    DTDC_PINCODE_URL: str = (
        "https://smarttrack.ctbsplus.dtdc.com/ratecalapi/PincodeApiCall"
    )
    DTDC_TIMEOUT: float = 45.0
    DTDC_MAX_RETRIES: int = 3

    # Warehouse used as consignment origin and return address
    WAREHOUSE_NAME: str = "SpareFlow Warehouse"
    WAREHOUSE_PHONE: str = "9999999999"
    WAREHOUSE_ADDRESS: str = "Andheri East"
    WAREHOUSE_CITY: str = "Mumbai"
    WAREHOUSE_STATE: str = "Maharashtra"
    WAREHOUSE_PINCODE: str = "400069"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin]


settings = Settings()
