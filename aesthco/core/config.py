from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: aesthco/core/config.py -> aesthco/core -> aesthco -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 gün
    database_url: str = "sqlite:///./aesthco.db"
    # CORS: virgülle ayrılmış origin listesi; production'da https://alandiniz.com
    cors_origins: str = "*"
    # IP başına dakikada max istek (rate limit)
    rate_limit_per_minute: int = 60
    # Sipariş oluşturma için ayrı limit (testte yüksek tutulabilir)
    rate_limit_checkout_per_minute: int = 10
    environment: str = "development"
    log_level: str = "INFO"
    # E-posta (sipariş bildirimleri): SMTP
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "noreply@aesthco.com"
    smtp_from_name: str = "Aesthco"
    smtp_use_tls: bool = True
    order_email_from: str = ""  # Boşsa smtp_from kullanılır
    brand_name: str = "Aesthco"
    # E-postadaki "Siparişi görüntüle" linkleri
    frontend_url: str = "http://127.0.0.1:8000"
    currency: str = "INR"  # Tutarlar en küçük birimde (paise) saklanır
    # Sipariş numarası: OD20251, OD20252, ...
    order_id_prefix: str = "OD"
    order_id_floor: int = 20251
    order_id_max_attempts: int = 3
    # Aktif kargo ayarı yoksa: 1999,00 ₹ üzeri ücretsiz, ücret 0
    default_free_shipping_threshold: int = 199900
    default_shipping_fee: int = 0

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("order_id_prefix", mode="before")
    @classmethod
    def strip_prefix(cls, v: str | None) -> str:
        return (v or "OD").strip().upper()

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str:
        """ISO 4217 kodu bekler (INR, EUR, ...)."""
        v = (v or "INR").strip().upper()
        if len(v) != 3:
            raise ValueError("Invalid currency code: expected ISO4217 length 3")
        return v


settings = Settings()


def cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
