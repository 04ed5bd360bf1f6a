from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_secret_key: str = ""

    # Apple Developer
    pass_type_identifier: str = ""
    team_identifier: str = ""

    # Certificates (base64 text, PEM or raw DER payload)
    pass_certificate_pem_base64: str = ""
    pass_key_pem_base64: str = ""
    wwdr_certificate_pem_base64: str = ""
    pass_key_passphrase: str | None = None
    openssl_bin: str = "openssl"

    # Admin
    admin_password: str = ""

    # "Today" for default place prefill is computed in this timezone
    default_place_timezone: str = "Asia/Seoul"

    # Pass artwork (photo*.png, strip*.png)
    pass_assets_dir: Path = PROJECT_ROOT / "pass_assets"

    # Card branding
    logo_text: str = "cho.sh"
    foreground_color: str = "rgb(128, 190, 122)"
    background_color: str = "rgb(29, 37, 27)"
    label_color: str = "rgb(128, 190, 122)"

    # Owner contact details printed on the card
    contact_phone: str = ""
    contact_email: str = ""
    contact_linkedin: str = ""
    contact_instagram: str = ""
    contact_kakao_url: str = ""

    @field_validator("team_identifier")
    @classmethod
    def _team_identifier_length(cls, value: str) -> str:
        if value and len(value) != 10:
            raise ValueError("team_identifier must be exactly 10 characters")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
