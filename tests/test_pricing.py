"""Tests for market price resolution and my-price computation."""

import pytest

from binderview.models.card import Finish
from binderview.services.pricing import compute_my_price, resolve_market_price


class TestResolveMarketPrice:
    def test_requested_finish(self) -> None:
        prices = {"usd": "2.00", "usd_foil": "5.00", "usd_etched": "7.00"}

        assert resolve_market_price(prices, Finish.NORMAL) == 2.0
        assert resolve_market_price(prices, Finish.FOIL) == 5.0
        assert resolve_market_price(prices, Finish.ETCHED) == 7.0

    def test_foil_falls_back_to_usd(self) -> None:
        assert resolve_market_price({"usd": "2.00"}, Finish.FOIL, promo=False) == 2.0

    def test_fallback_order(self) -> None:
        """Missing usd falls through to foil, then etched."""
        assert resolve_market_price({"usd": None, "usd_foil": "5.00"}, Finish.ETCHED) == 5.0
        assert resolve_market_price({"usd_etched": "7.00"}, Finish.NORMAL) == 7.0

    def test_promo_uses_foil_price(self) -> None:
        prices = {"usd": "2.00", "usd_foil": "5.00"}

        assert resolve_market_price(prices, Finish.NORMAL, promo=True) == 5.0

    def test_promo_without_foil_price_keeps_normal(self) -> None:
        assert resolve_market_price({"usd": "2.00"}, Finish.NORMAL, promo=True) == 2.0

    @pytest.mark.parametrize("finish", list(Finish))
    @pytest.mark.parametrize("promo", [True, False])
    def test_empty_prices(self, finish: Finish, promo: bool) -> None:
        assert resolve_market_price({}, finish, promo) == 0.0
        assert resolve_market_price(None, finish, promo) == 0.0

    def test_all_null_prices(self) -> None:
        prices = {"usd": None, "usd_foil": None, "usd_etched": None}

        assert resolve_market_price(prices, Finish.FOIL) == 0.0

    def test_unparseable_price_is_zero(self) -> None:
        assert resolve_market_price({"usd": "n/a"}) == 0.0
        assert resolve_market_price({"usd": "nan"}) == 0.0


class TestComputeMyPrice:
    def test_applies_multiplier(self) -> None:
        assert compute_my_price(450.0, multiplier=0.85) == pytest.approx(382.5)

    def test_default_multiplier(self) -> None:
        assert compute_my_price(10.0) == pytest.approx(8.5)

    def test_rounds_to_cents(self) -> None:
        assert compute_my_price(0.99, multiplier=0.85) == pytest.approx(0.84)

    def test_override_wins(self) -> None:
        assert compute_my_price(450.0, override="400") == 400.0

    def test_blank_or_invalid_override_ignored(self) -> None:
        assert compute_my_price(10.0, override="", multiplier=0.5) == 5.0
        assert compute_my_price(10.0, override="cheap", multiplier=0.5) == 5.0

    @pytest.mark.parametrize("override", ["nan", "inf", "-inf", "NaN"])
    def test_non_finite_override_ignored(self, override: str) -> None:
        assert compute_my_price(10.0, override=override, multiplier=0.5) == 5.0

    def test_zero_market_price(self) -> None:
        assert compute_my_price(0.0) == 0.0
