"""Configuration module for the Solana Umi client core."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from solana_umi.constants import COMMITMENT_LEVELS
from solana_umi.utils.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ConfigurationError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ConfigurationError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None:
        if required:
            raise ConfigurationError(
                f"Required environment variable '{key}' not found",
                details={"setting": key}
            )
        return default

    if validator is not None:
        try:
            return validator(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for environment variable '{key}': {str(e)}",
                details={"setting": key}
            ) from e

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to float.

    Raises:
        ValueError: If not a valid number
    """
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")


def url_validator(value: str) -> str:
    """Validate URL format.

    Args:
        value: URL to validate

    Returns:
        The validated URL

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Raises:
        ValueError: If not a valid commitment level
    """
    if value.lower() not in COMMITMENT_LEVELS:
        raise ValueError(f"Commitment must be one of: {', '.join(COMMITMENT_LEVELS)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


@dataclass
class SolanaConfig:
    """Configuration for the Solana RPC connection and confirmation polling."""

    rpc_url: str
    rpc_user: Optional[str] = None
    rpc_password: Optional[str] = field(default=None, repr=False)
    commitment: str = "confirmed"
    timeout: float = 30.0  # seconds
    max_retries: int = 3
    retry_delay: float = 1.0
    max_retry_delay: float = 10.0
    poll_interval: float = 2.0
    max_poll_attempts: int = 45
    confirm_timeout: float = 90.0
    secret_key: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.rpc_url:
            raise ConfigurationError(
                "Solana RPC URL is required",
                details={"setting": "rpc_url"}
            )
        if self.commitment not in COMMITMENT_LEVELS:
            raise ConfigurationError(
                f"Invalid commitment level: {self.commitment}",
                details={
                    "setting": "commitment",
                    "value": self.commitment,
                    "valid_values": list(COMMITMENT_LEVELS)
                }
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                details={"setting": "timeout", "value": self.timeout}
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                "Max retries must be non-negative",
                details={"setting": "max_retries", "value": self.max_retries}
            )
        if self.poll_interval <= 0 or self.max_poll_attempts <= 0:
            raise ConfigurationError(
                "Confirmation polling must be bounded by a positive interval and attempt count",
                details={
                    "poll_interval": self.poll_interval,
                    "max_poll_attempts": self.max_poll_attempts
                }
            )

    @property
    def has_auth(self) -> bool:
        """Check if authentication credentials are provided."""
        return bool(self.rpc_user and self.rpc_password)


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.

    Uses cached values for efficiency.

    Returns:
        SolanaConfig instance

    Raises:
        ConfigurationError: If environment variables fail validation
    """
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", "https://api.devnet.solana.com",
                            validator=url_validator),
        rpc_user=get_env_var("SOLANA_RPC_USER"),
        rpc_password=get_env_var("SOLANA_RPC_PASSWORD"),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30.0, validator=float_validator),
        max_retries=get_env_var("SOLANA_MAX_RETRIES", 3, validator=int_validator),
        retry_delay=get_env_var("SOLANA_RETRY_DELAY", 1.0, validator=float_validator),
        poll_interval=get_env_var("SOLANA_POLL_INTERVAL", 2.0, validator=float_validator),
        max_poll_attempts=get_env_var("SOLANA_MAX_POLL_ATTEMPTS", 45, validator=int_validator),
        confirm_timeout=get_env_var("SOLANA_CONFIRM_TIMEOUT", 90.0, validator=float_validator),
        secret_key=get_env_var("SOLANA_SECRET_KEY"),
    )


@lru_cache()
def get_log_level() -> str:
    """Get the configured log level."""
    return get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator)


@lru_cache()
def get_json_logs() -> bool:
    """Whether logs should be rendered as JSON lines."""
    return get_env_var("LOG_JSON", False, validator=bool_validator)
