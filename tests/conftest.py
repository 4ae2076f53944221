from unittest.mock import AsyncMock

import pytest


@pytest.fixture()
def mock_rpc():
    """EVMRPCClient stand-in: every async method is an AsyncMock."""
    rpc = AsyncMock()
    rpc.is_contract = AsyncMock(return_value=False)
    return rpc
