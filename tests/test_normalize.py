"""normalize.py tests"""

import math
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasser.domain.normalize import (
    to_number,
    non_negative,
    optional_number,
    to_text,
    optional_text,
    normalize_key,
    round_money,
    parse_size,
    pick,
    as_list,
)


class TestToNumber:
    """to_number / non_negative"""

    def test_plain_numbers(self):
        assert to_number(5) == 5.0
        assert to_number(2.5) == 2.5
        assert to_number(" 12.5 ") == 12.5

    def test_fallback_for_garbage(self):
        """None, bools, text and non-finite values give the fallback"""
        assert to_number(None) == 0.0
        assert to_number(True) == 0.0
        assert to_number("abc") == 0.0
        assert to_number(float("nan")) == 0.0
        assert to_number(math.inf, 1.0) == 1.0
        assert to_number([1, 2], 7.0) == 7.0

    def test_non_negative_clamps(self):
        assert non_negative(-10) == 0.0
        assert non_negative("-3") == 0.0
        assert non_negative(3) == 3.0

    def test_optional_number(self):
        """Absent stays None so overrides can be told apart from values"""
        assert optional_number(None) is None
        assert optional_number("") is None
        assert optional_number("abc") is None
        assert optional_number("1.1") == 1.1
        assert optional_number(0) == 0.0


class TestText:
    """text helpers"""

    def test_to_text(self):
        assert to_text(None) == ""
        assert to_text("  ЛДСП ") == "ЛДСП"
        assert to_text(42) == "42"

    def test_optional_text(self):
        assert optional_text("   ") is None
        assert optional_text(" a ") == "a"

    def test_normalize_key(self):
        assert normalize_key(" Premium ") == "premium"
        assert normalize_key("ЛДСП") == "лдсп"


class TestRoundMoney:
    """half-up rounding"""

    def test_half_rounds_up(self):
        assert round_money(2.5) == 3
        assert round_money(0.5) == 1
        assert round_money(1624.5) == 1625

    def test_below_half_rounds_down(self):
        assert round_money(923.4999) == 923
        assert round_money(924.0000000000002) == 924

    def test_garbage_is_zero(self):
        assert round_money(None) == 0
        assert round_money(float("nan")) == 0


class TestParseSize:
    """WxHxD parsing"""

    def test_standard(self):
        assert parse_size("1000x2000x500") == (1000.0, 2000.0, 500.0)

    def test_alternative_separators(self):
        """Latin X, multiplication sign, Cyrillic х and asterisk"""
        assert parse_size("600X800X150") == (600.0, 800.0, 150.0)
        assert parse_size("600×800×150") == (600.0, 800.0, 150.0)
        assert parse_size("600х800х150") == (600.0, 800.0, 150.0)
        assert parse_size("600*800*150") == (600.0, 800.0, 150.0)

    def test_missing_parts_are_zero(self):
        assert parse_size("600x800") == (600.0, 800.0, 0.0)
        assert parse_size("600xabcx150") == (600.0, 0.0, 150.0)
        assert parse_size(None) == (0.0, 0.0, 0.0)
        assert parse_size("") == (0.0, 0.0, 0.0)


class TestPick:
    """alias lookup"""

    def test_first_present_key(self):
        data = {"material_id": "m1", "materialId": None}
        assert pick(data, "materialId", "material_id") == "m1"

    def test_default(self):
        assert pick({}, "a", "b", default=3) == 3

    def test_as_list(self):
        assert as_list(None) == []
        assert as_list((1, 2)) == [1, 2]
        assert as_list("abc") == []
        assert as_list({"a": 1}) == []
