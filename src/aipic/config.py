"""Runtime configuration sourced from environment variables."""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Consulted in order when a request carries no API key; first non-empty wins
DEFAULT_API_KEY_ENV_VARS = ("AIPIC_API_KEY", "MODELSCOPE_API_KEY", "DASHSCOPE_API_KEY")

PROVIDER_NAMES = ("modelscope", "dashscope")

# Numeric settings read verbatim; pydantic coerces and range-checks them
NUMERIC_ENV_VARS = {
    "poll_max_attempts": "AIPIC_POLL_MAX_ATTEMPTS",
    "poll_interval_seconds": "AIPIC_POLL_INTERVAL_SECONDS",
    "submit_timeout_seconds": "AIPIC_SUBMIT_TIMEOUT_SECONDS",
    "generation_timeout_seconds": "AIPIC_GENERATION_TIMEOUT_SECONDS",
    "download_timeout_seconds": "AIPIC_DOWNLOAD_TIMEOUT_SECONDS",
}


class Settings(BaseModel):
    """Configuration for the image generation workflow."""

    api_key_env_vars: tuple[str, ...] = Field(
        DEFAULT_API_KEY_ENV_VARS,
        description="Environment variables consulted for a default API key, in priority order",
    )
    unrecognized_key_providers: tuple[str, ...] = Field(
        (),
        description="Providers tried, in order, for keys whose prefix matches no provider. Empty disables them.",
    )
    output_dir: Optional[str] = Field(None, description="Preferred directory for generated images")
    poll_max_attempts: int = Field(30, ge=1, description="Maximum task status reads before timing out")
    poll_interval_seconds: float = Field(10.0, ge=0.0, description="Delay between task status reads")
    submit_timeout_seconds: float = Field(30.0, gt=0.0, description="Timeout for task submission and status reads")
    generation_timeout_seconds: float = Field(60.0, gt=0.0, description="Timeout for synchronous generation calls")
    download_timeout_seconds: float = Field(90.0, gt=0.0, description="Timeout for downloading the final image")
    log_level: str = Field("INFO", description="Root log level for the server process")

    @field_validator("unrecognized_key_providers")
    @classmethod
    def validate_provider_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [name for name in value if name not in PROVIDER_NAMES]
        if unknown:
            raise ValueError(f"Unknown providers {unknown}. Available: {list(PROVIDER_NAMES)}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Build settings from AIPIC_* environment variables, keeping defaults for unset ones."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        if env.get("AIPIC_API_KEY_ENV_VARS"):
            values["api_key_env_vars"] = _split_list(env["AIPIC_API_KEY_ENV_VARS"])
        if env.get("AIPIC_UNRECOGNIZED_KEY_PROVIDERS"):
            values["unrecognized_key_providers"] = _split_list(env["AIPIC_UNRECOGNIZED_KEY_PROVIDERS"].lower())
        if env.get("AIPIC_OUTPUT_DIR"):
            values["output_dir"] = env["AIPIC_OUTPUT_DIR"]
        for field, var in NUMERIC_ENV_VARS.items():
            if env.get(var):
                values[field] = env[var]
        if env.get("AIPIC_LOG_LEVEL"):
            values["log_level"] = env["AIPIC_LOG_LEVEL"].upper()

        return cls(**values)

    def resolve_api_key(self, explicit: Optional[str] = None, environ: Optional[dict[str, str]] = None) -> Optional[str]:
        """Return the explicit key, else the first non-empty configured environment variable."""
        if explicit and explicit.strip():
            return explicit.strip()

        env = os.environ if environ is None else environ
        for name in self.api_key_env_vars:
            value = env.get(name, "").strip()
            if value:
                return value
        return None


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())
