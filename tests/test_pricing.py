"""
Unit tests for the pricing engine and option tables.
"""

import pytest

from core.exceptions import UnknownOptionError
from models.catalog import PrintModel
from models.pricing import MaterialOption, QualityOption, SizeOption
from modules.pricing import PricingEngine, round_half_up
from modules.print_options import OptionTables, load_option_tables


# Fixtures

@pytest.fixture
def tables():
    return OptionTables()


@pytest.fixture
def engine(tables):
    return PricingEngine(tables)


@pytest.fixture
def model():
    """Reference model: 800 base price, 8 hour base print time."""
    return PrintModel(
        id="1",
        title="Model 01",
        description="Sphere with bubbles",
        creator="John Doe",
        created_at="2023-12-01",
        file_url="/static/models/model01.glb",
        thumbnail_url="/static/images/model01.jpg",
        base_price=800,
        base_print_time=8,
    )


def _options(tables, **overrides):
    values = {
        "material": "pla",
        "quality": "standard",
        "size": "md",
        "quantity": 1,
        "infill": 20,
        "supports": False,
    }
    values.update(overrides)
    return tables.resolve(**values)


# Tests

class TestConcreteScenarios:
    """Worked examples with known results."""

    def test_reference_print_costs_base_price(self, engine, tables, model):
        """Medium/Standard/PLA at 20% infill without supports is the base price and time."""
        result = engine.price(model, _options(tables))

        assert result.total == 800
        assert result.print_time_hours == 8

    def test_high_quality_large_two_copies_with_supports(self, engine, tables, model):
        """High quality, Large, 2 copies, 50% infill, supports."""
        result = engine.price(model, _options(
            tables, quality="high", size="lg", quantity=2, infill=50, supports=True
        ))

        assert result.total == 4462
        assert result.print_time_hours == 40

    def test_result_dict_uses_price_and_time_keys(self, engine, tables, model):
        result = engine.price(model, _options(tables))
        assert result.to_dict() == {"price": 800, "time": 8}


class TestPricingProperties:
    """Properties that hold across option combinations."""

    @pytest.mark.parametrize("material", ["pla", "abs", "petg", "tpu", "resin"])
    @pytest.mark.parametrize("quality", ["draft", "standard", "high", "ultra"])
    @pytest.mark.parametrize("size", ["xs", "md", "xxl"])
    def test_baseline_is_product_of_catalogue_multipliers(self, engine, tables, model, material, quality, size):
        """At infill 20, no supports, quantity 1 only the catalogue multipliers apply."""
        options = _options(tables, material=material, quality=quality, size=size)
        result = engine.price(model, options)

        expected_price = round_half_up(
            800 * options.material.price_multiplier
            * options.quality.price_multiplier
            * options.size.price_multiplier
        )
        expected_time = round_half_up(8 * (options.quality.time_multiplier * options.size.scale))

        assert result.total == expected_price
        assert result.print_time_hours == expected_time

    @pytest.mark.parametrize("quantity", [2, 3, 7, 10])
    def test_quantity_scales_price_and_time(self, engine, tables, model, quantity):
        single = engine.price(model, _options(tables))
        multiple = engine.price(model, _options(tables, quantity=quantity))

        assert multiple.total == single.total * quantity
        assert multiple.print_time_hours == single.print_time_hours * quantity

    def test_infill_above_baseline_is_monotonic(self, engine, tables, model):
        results = [
            engine.price(model, _options(tables, quality="high", infill=infill))
            for infill in range(20, 101, 5)
        ]

        prices = [r.total for r in results]
        times = [r.print_time_hours for r in results]
        assert prices == sorted(prices)
        assert times == sorted(times)
        assert prices[-1] > prices[0]

    def test_infill_below_baseline_reduces_price(self, engine, tables, model):
        low = engine.price(model, _options(tables, infill=10))
        assert low.total == 720  # 800 × 0.9

    def test_supports_increase_price_and_time(self, engine, tables, model):
        without = engine.price(model, _options(tables, supports=False))
        with_supports = engine.price(model, _options(tables, supports=True))

        assert with_supports.total > without.total
        assert with_supports.print_time_hours > without.print_time_hours
        assert with_supports.total == 880  # 800 × 1.10

    def test_identical_inputs_give_identical_results(self, engine, tables, model):
        options = _options(tables, material="petg", quality="ultra", size="xl", quantity=4)
        assert engine.price(model, options) == engine.price(model, options)


class TestClamping:
    """Out-of-range quantity and infill are clamped, never rejected."""

    def test_quantity_below_minimum_counts_as_one(self, engine, tables, model):
        assert engine.price(model, _options(tables, quantity=0)).total == 800

    def test_quantity_above_maximum_is_capped(self, engine, tables, model):
        assert engine.price(model, _options(tables, quantity=500)).total == 800 * 100

    def test_infill_is_clamped_to_range(self, engine, tables, model):
        assert engine.price(model, _options(tables, infill=0)) == engine.price(model, _options(tables, infill=10))
        assert engine.price(model, _options(tables, infill=150)) == engine.price(model, _options(tables, infill=100))

    def test_non_numeric_form_values_fall_back_to_defaults(self, engine, tables, model):
        options = _options(tables, quantity="abc", infill="")
        assert options.quantity == 1
        assert options.infill == 20
        assert engine.price(model, options).total == 800

    def test_zero_base_price_never_goes_negative(self, engine, tables, model):
        model.base_price = 0
        model.base_print_time = 0
        result = engine.price(model, _options(tables, infill=10))
        assert result.total == 0
        assert result.print_time_hours == 0


class TestRounding:
    """Half values round up."""

    @pytest.mark.parametrize("value,expected", [
        (4461.6, 4462),
        (39.675, 40),
        (2.5, 3),
        (3.5, 4),
        (2.49, 2),
        (0.0, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestOptionTables:
    """Lookups, injection and loading."""

    def test_unknown_material_raises(self, tables):
        with pytest.raises(UnknownOptionError) as exc_info:
            _options(tables, material="unobtainium")

        assert exc_info.value.kind == "material"
        assert "pla" in exc_info.value.details["valid_ids"]

    def test_unknown_size_raises_from_quote(self, engine, model):
        with pytest.raises(UnknownOptionError):
            engine.quote(model, {"material": "pla", "quality": "standard", "size": "huge"})

    def test_quote_accepts_form_strings(self, engine, model):
        result = engine.quote(model, {
            "material": "pla",
            "quality": "high",
            "size": "lg",
            "quantity": "2",
            "infill": "50",
            "supports": "true",
        })
        assert result.to_dict() == {"price": 4462, "time": 40}

    def test_injected_tables_drive_pricing(self, model):
        tables = OptionTables(
            materials=(MaterialOption("gold", "Gold", 10.0),),
            qualities=(QualityOption("fast", "Fast", 0.5, 0.25),),
            sizes=(SizeOption("one", "One size", 2.0, 1.0),),
        )
        engine = PricingEngine(tables)

        result = engine.price(model, tables.resolve("gold", "fast", "one"))

        assert result.total == 4000  # 800 × 10 × 0.5 × 1.0
        assert result.print_time_hours == 4  # 8 × 0.25 × 2.0

    def test_injected_tables_reject_default_ids(self, model):
        tables = OptionTables(materials=(MaterialOption("gold", "Gold", 10.0),))
        with pytest.raises(UnknownOptionError):
            tables.resolve("pla", "standard", "md")

    def test_from_dict_overrides_only_given_sections(self):
        tables = OptionTables.from_dict({
            "materials": [{"id": "nylon", "name": "Nylon", "priceMultiplier": 1.7}],
            "defaults": {"material": "nylon"},
        })

        assert [m.id for m in tables.materials] == ["nylon"]
        assert tables.material("nylon").price_multiplier == 1.7
        assert tables.quality("high").price_multiplier == 1.3
        assert tables.defaults["material"] == "nylon"

    def test_load_option_tables_from_file(self, tmp_path):
        path = tmp_path / "options.json"
        path.write_text(
            '{"sizes": [{"id": "s", "name": "S", "scale": 0.5, "priceMultiplier": 0.5}]}',
            encoding="utf-8",
        )

        tables = load_option_tables(str(path))

        assert [s.id for s in tables.sizes] == ["s"]

    def test_load_option_tables_without_path_uses_builtins(self):
        tables = load_option_tables(None)
        assert [m.id for m in tables.materials] == ["pla", "abs", "petg", "tpu", "resin"]

    def test_describe_maps_ids_to_names(self, tables):
        labels = tables.describe({"material": "petg", "quality": "high", "size": "lg", "color": "red"})
        assert labels["quality"] == "High (0.1mm)"
        assert labels["color"] == "Red"

    def test_breakdown_reports_multipliers(self, engine, tables, model):
        breakdown = engine.breakdown(model, _options(tables, infill=50, supports=True))

        assert breakdown["multipliers"]["infill_price"] == 1.3
        assert breakdown["multipliers"]["supports_time"] == 1.15
        assert breakdown["price"] == engine.price(model, _options(tables, infill=50, supports=True)).total
