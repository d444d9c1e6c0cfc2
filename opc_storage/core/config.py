"""Client configuration using Pydantic BaseSettings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_env_string(value: str) -> str:
    """Sanitize an environment variable string value.

    Removes whitespace, quotes, and control characters to prevent issues with:
    - Trailing carriage returns (\\r) or newlines (\\n) from Windows line endings
    - Accidental quotes around values in env files
    - Leading/trailing whitespace from copy-paste errors

    Args:
        value: The raw string value from environment variable.

    Returns:
        Cleaned string with quotes, whitespace, and control characters removed.
    """
    value = value.strip()
    if (value.startswith('"') and value.endswith('"')) or (
        value.startswith("'") and value.endswith("'")
    ):
        value = value[1:-1].strip()
    value = value.replace("\r", "").replace("\n", "").replace("\t", "")
    return value


def find_env_file() -> Path | None:
    """Find .env file in current or parent directories."""
    current = Path.cwd()
    for path in [current, current.parent]:
        env_file = path / ".env"
        if env_file.exists():
            return env_file
    return None


class Settings(BaseSettings):
    """Storage client settings.

    Required fields are optional here so the module-level instance can load
    without credentials; ApiClient rejects an incomplete config.
    """

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    # === Debug ===
    DEBUG: bool = False

    # === Logfire ===
    LOGFIRE_TOKEN: str | None = None
    LOGFIRE_SERVICE_NAME: str = "opc_storage"
    LOGFIRE_ENVIRONMENT: str = "development"

    # === Identity ===
    OPC_IDENTITY_DOMAIN: str | None = None
    OPC_USERNAME: str | None = None
    OPC_PASSWORD: str | None = None

    # === Transport ===
    # Example: "https://mydomain.storage.oraclecloud.com/"
    OPC_ENDPOINT: str | None = None
    OPC_MAX_RETRIES: int = 1  # total attempts per request
    OPC_HTTP_TIMEOUT: float = 30.0  # seconds

    @field_validator(
        "OPC_IDENTITY_DOMAIN",
        "OPC_USERNAME",
        "OPC_PASSWORD",
        "OPC_ENDPOINT",
        "LOGFIRE_TOKEN",
        mode="before",
    )
    @classmethod
    def sanitize_strings(cls, v: str | None) -> str | None:
        """Sanitize string fields to handle copy-paste issues."""
        if v is None or v == "":
            return v
        return _sanitize_env_string(v)

    @field_validator("OPC_MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """Validate at least one attempt is made per request."""
        if v < 1:
            raise ValueError("OPC_MAX_RETRIES must be at least 1")
        return v

    @field_validator("OPC_HTTP_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("OPC_HTTP_TIMEOUT must be positive")
        return v


settings = Settings()
