"""
Static model pricing table.

Prices live in a versioned YAML asset (``pricing.yaml`` next to this module)
rather than in adapter code. The table is read-only once loaded; refreshing
prices means shipping a new asset.
"""

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import ConfigurationError, UnpricedModel
from ..models.response import CostEstimate, Usage

logger = logging.getLogger(__name__)

DEFAULT_PRICING_PATH = Path(__file__).parent / "pricing.yaml"


class PricingEntry(BaseModel):
    """Per-1K-token prices for one model."""
    model_config = ConfigDict(frozen=True)

    model_id: str
    provider: str
    input_cost_per_1k: float = Field(..., ge=0)
    output_cost_per_1k: float = Field(..., ge=0)


class PricingTable:
    """
    Read-only mapping from exact model identifier to its pricing entry.
    """

    def __init__(
        self,
        entries: Mapping[str, PricingEntry],
        version: Optional[str] = None,
        effective_date: Optional[str] = None,
    ):
        self._entries = MappingProxyType(dict(entries))
        self.version = version
        self.effective_date = effective_date

    @property
    def entries(self) -> Mapping[str, PricingEntry]:
        return self._entries

    def get(self, model_id: str) -> PricingEntry:
        """
        Look up the pricing entry for a model.

        Raises:
            UnpricedModel: If the model has no entry
        """
        try:
            return self._entries[model_id]
        except KeyError:
            raise UnpricedModel(model_id) from None

    def estimate(self, model_id: str, usage: Usage) -> CostEstimate:
        """
        Compute the cost of a call from its token usage.

        Raises:
            UnpricedModel: If the model has no entry
        """
        entry = self.get(model_id)
        input_cost = (usage.prompt_tokens / 1000) * entry.input_cost_per_1k
        output_cost = (usage.completion_tokens / 1000) * entry.output_cost_per_1k
        return CostEstimate(
            model_id=model_id,
            input_cost=input_cost,
            output_cost=output_cost,
            total_cost=input_cost + output_cost,
        )

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PricingTable(version={self.version!r}, models={len(self)})"


def _parse_pricing(data: Dict[str, Any], source: str) -> PricingTable:
    if not isinstance(data, dict) or not isinstance(data.get("providers"), dict):
        raise ConfigurationError(f"Pricing file {source} has no 'providers' mapping")

    entries: Dict[str, PricingEntry] = {}
    for provider, models in data["providers"].items():
        for model_id, prices in (models or {}).items():
            if model_id in entries:
                raise ConfigurationError(
                    f"Pricing file {source} lists {model_id} more than once"
                )
            try:
                entries[model_id] = PricingEntry(
                    model_id=model_id, provider=provider, **(prices or {})
                )
            except (TypeError, ValidationError) as e:
                raise ConfigurationError(
                    f"Invalid pricing entry for {model_id} in {source}: {e}"
                ) from e

    return PricingTable(
        entries,
        version=str(data["version"]) if data.get("version") is not None else None,
        effective_date=str(data.get("effective_date") or "") or None,
    )


def load_pricing_table(path: Optional[str] = None) -> PricingTable:
    """
    Load a pricing table from YAML.

    Args:
        path: Pricing file. If None, the bundled schedule is used (cached).

    Returns:
        Loaded pricing table
    """
    if path is None:
        return _default_pricing_table()
    return _read_pricing_file(Path(path))


@lru_cache(maxsize=1)
def _default_pricing_table() -> PricingTable:
    return _read_pricing_file(DEFAULT_PRICING_PATH)


def _read_pricing_file(path: Path) -> PricingTable:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load pricing from {path}: {e}") from e

    table = _parse_pricing(data, str(path))
    logger.info(f"Loaded pricing table {table.version} ({len(table)} models) from {path}")
    return table
