"""
Root-level conftest for pytest configuration
"""
import os

import pytest

# Tests start from an empty Solana environment
for _var in list(os.environ):
    if _var.startswith("SOLANA_") or _var in ("LOG_LEVEL", "LOG_JSON"):
        os.environ.pop(_var, None)


# Set asyncio mode to auto instead of strict
def pytest_configure(config):
    """Configure pytest"""
    # Set asyncio mode
    config.option.asyncio_mode = "auto"

    # Set log format for pytest
    from solana_umi.logging_config import configure_logging
    configure_logging("DEBUG")


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Reset memoized configuration between tests."""
    from solana_umi.config import get_json_logs, get_log_level, get_solana_config
    for getter in (get_solana_config, get_log_level, get_json_logs):
        getter.cache_clear()
    yield
    for getter in (get_solana_config, get_log_level, get_json_logs):
        getter.cache_clear()
