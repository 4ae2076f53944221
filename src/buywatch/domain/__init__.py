from buywatch.domain.models import (
    ChainLog,
    Pool,
    PoolCreatedLog,
    PurchaseEvent,
    SwapLog,
    Tier,
    TransferLog,
)

__all__ = [
    "ChainLog",
    "Pool",
    "PoolCreatedLog",
    "PurchaseEvent",
    "SwapLog",
    "Tier",
    "TransferLog",
]
