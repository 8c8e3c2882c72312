import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Always load .env from the project root (stable, regardless of CWD)
BASE_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=BASE_DIR / ".env", override=False)


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v and v.strip() else default


@dataclass(frozen=True)
class Settings:
    env: str = field(default_factory=lambda: _env("ENV", "local"))
    database_url: str = field(
        default_factory=lambda: _env("DATABASE_URL", "sqlite:///./lecture_pilot.db")
    )
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    # Generative content API
    openai_api_key: str | None = field(default_factory=lambda: _env("OPENAI_API_KEY"))
    openai_model: str = field(default_factory=lambda: _env("OPENAI_MODEL", "gpt-4o-mini"))
    openai_search_model: str = field(
        default_factory=lambda: _env("OPENAI_SEARCH_MODEL", "gpt-4o-mini")
    )
    openai_timeout_sec: float = field(
        default_factory=lambda: float(_env("OPENAI_TIMEOUT_SEC", "180"))
    )
    # Nothing is retried automatically; the SDK knob stays at 0 unless overridden
    openai_max_retries: int = field(
        default_factory=lambda: int(_env("OPENAI_MAX_RETRIES", "0"))
    )

    # Identity backend (Supabase)
    supabase_url: str | None = field(default_factory=lambda: _env("SUPABASE_URL"))
    supabase_anon_key: str | None = field(default_factory=lambda: _env("SUPABASE_ANON_KEY"))

    # Transactional email (EmailJS)
    emailjs_service_id: str | None = field(default_factory=lambda: _env("EMAILJS_SERVICE_ID"))
    emailjs_template_id: str | None = field(default_factory=lambda: _env("EMAILJS_TEMPLATE_ID"))
    emailjs_public_key: str | None = field(default_factory=lambda: _env("EMAILJS_PUBLIC_KEY"))
    emailjs_api_url: str = field(
        default_factory=lambda: _env(
            "EMAILJS_API_URL", "https://api.emailjs.com/api/v1.0/email/send"
        )
    )

    # Public video metadata lookup
    noembed_url: str = field(
        default_factory=lambda: _env("NOEMBED_URL", "https://noembed.com/embed")
    )
    http_timeout_sec: float = field(
        default_factory=lambda: float(_env("HTTP_TIMEOUT_SEC", "15"))
    )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def emailjs_configured(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)


settings = Settings()
