"""
Unit tests for the pricing table.
"""
import pytest

from llm_gateway.core.errors import ConfigurationError, UnpricedModel
from llm_gateway.models.response import Usage
from llm_gateway.pricing.table import PricingEntry, PricingTable, load_pricing_table


class TestBundledPricing:
    """Test the bundled pricing schedule."""

    def test_bundled_table_loads(self):
        """Test the bundled asset contains both providers' models."""
        table = load_pricing_table()
        assert "gpt-4o" in table
        assert "gemini-1.5-flash" in table
        assert "claude-3-5-sonnet@20240620" in table
        assert table.version == "2024-11"

    def test_bundled_table_is_cached(self):
        """Test the default table is loaded once."""
        assert load_pricing_table() is load_pricing_table()

    def test_entries_are_read_only(self):
        """Test the entries mapping cannot be mutated."""
        table = load_pricing_table()
        with pytest.raises(TypeError):
            table.entries["new-model"] = table.get("gpt-4o")

    def test_gpt_4o_cost(self):
        """Test gpt-4o 1000 prompt + 500 completion tokens."""
        table = load_pricing_table()
        estimate = table.estimate("gpt-4o", Usage(prompt_tokens=1000, completion_tokens=500))
        assert estimate.input_cost == pytest.approx(0.0025)
        assert estimate.output_cost == pytest.approx(0.005)
        assert estimate.total_cost == pytest.approx(0.0075)

    def test_gemini_flash_cost(self):
        """Test gemini-1.5-flash 2000 prompt tokens, no output."""
        table = load_pricing_table()
        estimate = table.estimate("gemini-1.5-flash", Usage(prompt_tokens=2000, completion_tokens=0))
        assert estimate.total_cost == pytest.approx(0.00015)

    def test_unknown_model_raises(self):
        """Test lookups of unknown models raise UnpricedModel."""
        table = load_pricing_table()
        with pytest.raises(UnpricedModel) as exc_info:
            table.get("foo-bar")
        assert exc_info.value.model_id == "foo-bar"
        assert "foo-bar" in str(exc_info.value)

    def test_lookup_is_exact(self):
        """Test model identifiers are matched exactly."""
        table = load_pricing_table()
        assert "GPT-4o" not in table
        assert "gpt-4o-2024-08-06" not in table


class TestPricingFile:
    """Test loading pricing from a custom file."""

    def test_load_custom_file(self, tmp_path):
        """Test a swapped-in asset replaces the bundled one."""
        path = tmp_path / "pricing.yaml"
        path.write_text(
            "version: '2025-01'\n"
            "providers:\n"
            "  openai:\n"
            "    gpt-4o:\n"
            "      input_cost_per_1k: 0.002\n"
            "      output_cost_per_1k: 0.008\n"
        )
        table = load_pricing_table(str(path))
        assert table.version == "2025-01"
        assert len(table) == 1
        assert table.get("gpt-4o") == PricingEntry(
            model_id="gpt-4o", provider="openai",
            input_cost_per_1k=0.002, output_cost_per_1k=0.008,
        )

    def test_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_pricing_table(str(tmp_path / "nope.yaml"))

    def test_missing_providers_key(self, tmp_path):
        """Test a file without providers is rejected."""
        path = tmp_path / "pricing.yaml"
        path.write_text("version: '1'\n")
        with pytest.raises(ConfigurationError):
            load_pricing_table(str(path))

    def test_negative_price_rejected(self, tmp_path):
        """Test prices must not be negative."""
        path = tmp_path / "pricing.yaml"
        path.write_text(
            "providers:\n"
            "  openai:\n"
            "    gpt-4o:\n"
            "      input_cost_per_1k: -1\n"
            "      output_cost_per_1k: 0\n"
        )
        with pytest.raises(ConfigurationError):
            load_pricing_table(str(path))

    def test_duplicate_model_rejected(self, tmp_path):
        """Test one model cannot be priced by two providers."""
        path = tmp_path / "pricing.yaml"
        path.write_text(
            "providers:\n"
            "  openai:\n"
            "    shared:\n"
            "      input_cost_per_1k: 1\n"
            "      output_cost_per_1k: 1\n"
            "  gcp:\n"
            "    shared:\n"
            "      input_cost_per_1k: 2\n"
            "      output_cost_per_1k: 2\n"
        )
        with pytest.raises(ConfigurationError):
            load_pricing_table(str(path))


class TestPricingTable:
    """Test PricingTable behaviour."""

    def test_estimate_is_pure(self):
        """Test identical usage gives identical cost."""
        table = PricingTable({
            "m": PricingEntry(model_id="m", provider="p", input_cost_per_1k=1.0, output_cost_per_1k=2.0),
        })
        usage = Usage(prompt_tokens=1500, completion_tokens=250)
        first = table.estimate("m", usage)
        second = table.estimate("m", usage)
        assert first == second
        assert first.total_cost == pytest.approx(1.5 + 0.5)
