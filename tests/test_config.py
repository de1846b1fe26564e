"""
Tests for the rules file loader and cache.
"""

from decimal import Decimal

import pytest

from autoquote.config import DEFAULT_RULES_PATH, RulesCache, RulesConfig, load_rules
from autoquote.services.risk import RiskCalculator

CUSTOM_RULES = """
rating:
  base_premium: "600.00"
discounts:
  cap: "0.20"
quote:
  validity_days: 14
"""


def test_default_rules_file_matches_built_in_defaults():
    """The shipped YAML describes the same rules as the model defaults, plus the limits."""
    rules = load_rules(DEFAULT_RULES_PATH)
    defaults = RulesConfig()

    assert rules.rating == defaults.rating
    assert rules.discounts == defaults.discounts
    assert rules.quote.validity_days == 30
    assert rules.validation.vin_pattern == defaults.validation.vin_pattern
    assert rules.validation.coverage_limits.min == Decimal("25000.00")
    assert rules.validation.coverage_limits.max == Decimal("1000000.00")
    assert rules.validation.deductible_limits.min == Decimal("250.00")
    assert rules.validation.deductible_limits.max == Decimal("10000.00")


def test_partial_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(CUSTOM_RULES)
    rules = load_rules(str(path))

    assert rules.rating.base_premium == Decimal("600.00")
    assert rules.rating.reference_coverage == Decimal("100000.00")
    assert rules.discounts.cap == Decimal("0.20")
    assert len(rules.discounts.rules) == 2
    assert rules.quote.validity_days == 14


def test_empty_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("")
    assert load_rules(str(path)) == RulesConfig()


def test_unknown_discount_flag_rejected(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        "discounts:\n"
        "  rules:\n"
        "    - flag: loyalty_discount\n"
        "      description: Loyalty\n"
        "      rate: \"0.05\"\n"
    )
    with pytest.raises(ValueError):
        load_rules(str(path))


def test_cache_loads_once(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(CUSTOM_RULES)
    cache = RulesCache(str(path))

    first = cache.get_rules()
    path.write_text("rating:\n  base_premium: \"700.00\"\n")
    assert cache.get_rules() is first

    cache.clear_cache()
    assert cache.get_rules().rating.base_premium == Decimal("700.00")


def test_cache_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "rules.yaml"
    path.write_text(CUSTOM_RULES)
    monkeypatch.setenv("QUOTE_RULES_PATH", str(path))

    cache = RulesCache()
    assert cache.path == str(path)
    assert cache.get_rules().quote.validity_days == 14


def test_rating_rules_drive_calculator(make_request):
    rules = load_rules(DEFAULT_RULES_PATH).rating.model_copy(update={"base_premium": Decimal("1000.00")})
    # 1000 * 1.06 * 0.93
    assert RiskCalculator(rules=rules).calculate_base_premium(make_request()) == Decimal("985.80")
