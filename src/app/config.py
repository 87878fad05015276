"""Configuration management using Pydantic settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cockpit.prompts import AIRCRAFT_FLEET, DEFAULT_AIRCRAFT


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # Application
    app_name: str = "SHAJJU SIMULATION"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Model service: "ollama" (local) or "gemini" (Google Generative Language API)
    model_backend: str = "ollama"
    model_timeout: float = 120.0  # seconds; the only bound on a hung call

    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gemma3:4b"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Coercion: False turns malformed gauge text into NaN, True rejects the reply
    strict_coercion: bool = False

    # Session
    default_aircraft: str = DEFAULT_AIRCRAFT
    history_limit: int = 20

    @field_validator("default_aircraft")
    @classmethod
    def _known_aircraft(cls, value: str) -> str:
        if value not in AIRCRAFT_FLEET:
            raise ValueError(f"default_aircraft must be one of {', '.join(AIRCRAFT_FLEET)}")
        return value


settings = Settings()
