"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    solana_config,
    rpc_mock,
    ledger_client,
    mock_ledger_client,
    payer_signer,
    recipient,
    signed_transfer,
    umi_context,
)
