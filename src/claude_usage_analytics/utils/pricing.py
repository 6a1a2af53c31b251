"""Model pricing table, cost calculation and display formatting."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Mapping

import orjson

from claude_usage_analytics.types.messages import TokenUsage
from claude_usage_analytics.types.sessions import TokenStats

logger = logging.getLogger(__name__)

DEFAULT_MODEL_KEY = "default"


@dataclass(frozen=True)
class ModelPricing:
    """Unit prices in USD per 1M tokens."""
    input: float
    output: float
    cache_write: float
    cache_read: float


# Per 1M tokens (as of Nov 2025). cache_write is the 5-minute cache rate.
DEFAULT_PRICES: dict[str, ModelPricing] = {
    "claude-opus-4-5-20251101":   ModelPricing(input=5.00,  output=25.00, cache_write=6.25,  cache_read=0.50),
    "claude-opus-4-20250514":     ModelPricing(input=15.00, output=75.00, cache_write=18.75, cache_read=1.50),
    "claude-sonnet-4-5-20250929": ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
    "claude-sonnet-4-20250514":   ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
    "claude-haiku-4-5-20250514":  ModelPricing(input=1.00,  output=5.00,  cache_write=1.25,  cache_read=0.10),
    # Legacy
    "claude-3-5-sonnet-20241022": ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
    "claude-3-5-sonnet-20240620": ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
    "claude-3-5-haiku-20241022":  ModelPricing(input=0.80,  output=4.00,  cache_write=1.00,  cache_read=0.08),
    "claude-3-opus-20240229":     ModelPricing(input=15.00, output=75.00, cache_write=18.75, cache_read=1.50),
    "claude-3-sonnet-20240229":   ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
    "claude-3-haiku-20240307":    ModelPricing(input=0.25,  output=1.25,  cache_write=0.30,  cache_read=0.03),
    # Fallback (Sonnet pricing)
    DEFAULT_MODEL_KEY:            ModelPricing(input=3.00,  output=15.00, cache_write=3.75,  cache_read=0.30),
}


class PricingTable:
    """Read-only lookup from exact model id to unit prices.

    Unknown model ids resolve to the "default" entry.
    """

    def __init__(self, prices: Mapping[str, ModelPricing] | None = None):
        table = dict(DEFAULT_PRICES if prices is None else prices)
        if DEFAULT_MODEL_KEY not in table:
            table[DEFAULT_MODEL_KEY] = DEFAULT_PRICES[DEFAULT_MODEL_KEY]
        self._prices = table

    @classmethod
    def from_file(cls, path: str | Path) -> "PricingTable":
        """Overlay a JSON pricing file on the default table.

        The file maps model ids to {"input", "output", "cacheWrite", "cacheRead"}.
        Unreadable files and malformed entries are logged and ignored.
        """
        prices = dict(DEFAULT_PRICES)
        try:
            raw = orjson.loads(Path(path).read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("Could not load pricing file %s: %s", path, e)
            return cls(prices)

        if not isinstance(raw, dict):
            logger.warning("Pricing file %s is not a JSON object", path)
            return cls(prices)

        for model, entry in raw.items():
            if not isinstance(entry, dict):
                continue
            try:
                prices[model] = ModelPricing(
                    input=float(entry["input"]),
                    output=float(entry["output"]),
                    cache_write=float(entry["cacheWrite"]),
                    cache_read=float(entry["cacheRead"]),
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed pricing entry for %s", model)
        return cls(prices)

    @property
    def models(self) -> list[str]:
        return list(self._prices)

    def pricing_for(self, model: str) -> ModelPricing:
        return self._prices.get(model) or self._prices[DEFAULT_MODEL_KEY]

    def cost(self, usage: TokenUsage, model: str) -> float:
        """Calculate cost in USD for one usage tuple."""
        pricing = self.pricing_for(model)
        return (
            usage.input_tokens / 1_000_000 * pricing.input
            + usage.output_tokens / 1_000_000 * pricing.output
            + usage.cache_creation_input_tokens / 1_000_000 * pricing.cache_write
            + usage.cache_read_input_tokens / 1_000_000 * pricing.cache_read
        )

    def cost_from_stats(self, stats: TokenStats, model: str) -> float:
        return self.cost(stats.as_usage(), model)


def _round_half_up(value: float, places: int) -> str:
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_cost(cost: float) -> str:
    if cost == 0:
        return "$0.00"
    if cost < 0.01:
        return f"${_round_half_up(cost, 4)}"
    if cost < 1:
        return f"${_round_half_up(cost, 3)}"
    return f"${_round_half_up(cost, 2)}"


def format_tokens(tokens: int) -> str:
    if tokens >= 1_000_000:
        return f"{_round_half_up(tokens / 1_000_000, 1)}M"
    if tokens >= 1_000:
        return f"{_round_half_up(tokens / 1_000, 1)}K"
    return str(tokens)


def format_duration(minutes: float) -> str:
    if minutes < 1:
        return "<1 min"
    if minutes < 60:
        return f"{int(minutes + 0.5)} min"
    hours = int(minutes // 60)
    mins = int(minutes % 60 + 0.5)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_short_date(dt: datetime) -> str:
    """Jan 5"""
    dt = _as_utc(dt)
    return f"{_MONTHS[dt.month - 1]} {dt.day}"


def format_day(dt: datetime) -> str:
    """Jan 5, 2026"""
    dt = _as_utc(dt)
    return f"{_MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def format_date(dt: datetime) -> str:
    """Jan 5, 2026, 02:30 PM (UTC)"""
    dt = _as_utc(dt)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{format_day(dt)}, {hour:02d}:{dt.minute:02d} {meridiem}"
