"""Purchase classifier: decides whether a pool swap is a buy worth announcing."""

import logging
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from buywatch.domain.models import Pool, PurchaseEvent, SwapLog

logger = logging.getLogger(__name__)


class ClassifiedBuy(BaseModel):
    """A swap that passed classification, still waiting for its buyer."""

    model_config = ConfigDict(frozen=True)

    swap: SwapLog
    token_amount: Decimal
    usd_amount: Decimal
    price: Decimal

    def with_buyer(self, buyer: str) -> PurchaseEvent:
        return PurchaseEvent(
            buyer=buyer,
            token_amount=self.token_amount,
            usd_amount=self.usd_amount,
            price=self.price,
            tx_hash=self.swap.tx_hash,
            pool_address=self.swap.pool_address,
            block_number=self.swap.block_number,
        )


class PurchaseClassifier:
    """Buy = token leg leaves the pool (< 0) while the quote leg enters it (> 0).

    Sells, zero legs and same-direction anomalies are ignored, as are buys
    whose USD notional is below `min_usd`.
    """

    def __init__(self, token_decimals: int, quote_decimals: int, min_usd: Decimal | float) -> None:
        self._token_scale = Decimal(10) ** token_decimals
        self._quote_scale = Decimal(10) ** quote_decimals
        self._min_usd = Decimal(str(min_usd))

    def classify(self, swap: SwapLog, pool: Pool) -> ClassifiedBuy | None:
        token_leg, quote_leg = pool.legs(swap)
        if not (token_leg < 0 and quote_leg > 0):
            return None

        usd = Decimal(quote_leg) / self._quote_scale
        if usd < self._min_usd:
            logger.debug("Ignoring dust buy of $%s in tx %s", usd, swap.tx_hash)
            return None

        token_amount = Decimal(-token_leg) / self._token_scale
        return ClassifiedBuy(
            swap=swap,
            token_amount=token_amount,
            usd_amount=usd,
            price=usd / token_amount,
        )
