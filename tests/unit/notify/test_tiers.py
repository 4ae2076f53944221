from decimal import Decimal

import pytest

from buywatch.notify.tiers import DEFAULT_TIERS, tier_for


class TestTierFor:
    @pytest.mark.parametrize(
        ("usd", "label"),
        [
            ("10", "Shrimp"),
            ("49.99", "Shrimp"),
            ("50.00", "Fish"),
            ("199.99", "Fish"),
            ("200", "Dolphin"),
            ("499.99", "Dolphin"),
            ("500", "Whale"),
            ("1000000", "Whale"),
        ],
    )
    def test_boundaries(self, usd, label):
        assert tier_for(Decimal(usd)).label == label

    def test_thresholds_ascending(self):
        mins = [t.min_usd for t in DEFAULT_TIERS]
        assert mins == sorted(mins)
