"""Behavioral contracts of convert_as.

These pin the properties callers rely on regardless of how the individual
converters are implemented.
"""

import base64
import string

import pytest

from envcast import INFINITY, ConfigError, ConversionError, convert_as
from envcast.duration_parser import parse_duration_literal
from envcast.types import Failure, Success, TimeUnit

_DIGITS = string.digits + string.ascii_uppercase


def _to_base(n, base):
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, rem = divmod(n, base)
        digits.append(_DIGITS[rem])
    return sign + "".join(reversed(digits))


class TestConversionContracts:
    """Documented examples and cross-cutting guarantees."""

    @pytest.mark.contract
    def test_documented_examples(self):
        assert convert_as("18EB", "PORT", "integer", base=16) == 6379
        assert convert_as(None, "TIMEOUT", "timeout") == INFINITY
        assert convert_as("1,2,3", "LIST", ("list", "integer")) == [1, 2, 3]

    @pytest.mark.contract
    def test_safe_atom_casefold_example(self):
        assert (
            convert_as("OFF", "X", "safe_atom", downcase=True, allowed=["on", "off"])
            == "off"
        )
        with pytest.raises(ConversionError):
            convert_as("OFF", "X", "safe_atom", downcase=False, allowed=["on", "off"])

    @pytest.mark.contract
    @pytest.mark.parametrize("base", range(2, 37))
    def test_integer_round_trips_in_every_base(self, base):
        for n in (0, 1, -1, base - 1, base, 6379, -123456789, 2**70):
            assert convert_as(_to_base(n, base), "N", "integer", base=base) == n

    @pytest.mark.contract
    def test_encoded_bytes_come_back_unchanged(self):
        data = bytes(range(256))
        assert convert_as(base64.b16encode(data).decode(), "B", "base16") == data
        lower = base64.b16encode(data).decode().lower()
        assert convert_as(lower, "B", "base16", case="lower") == data
        assert convert_as(base64.b32encode(data).decode(), "B", "base32", padding=True) == data
        assert convert_as(base64.b32hexencode(data).decode().rstrip("="), "B", "hex32") == data
        assert convert_as(base64.b64encode(data).decode(), "B", "base64", padding=True) == data
        assert convert_as(base64.urlsafe_b64encode(data).decode(), "B", "url_base64") == data

    @pytest.mark.contract
    def test_option_errors_precede_value_inspection(self):
        for raw in (None, "", "1", "garbage"):
            with pytest.raises(ConfigError):
                convert_as(raw, "FLAG", "boolean", truthy=["y"], falsy=["n"])

    @pytest.mark.contract
    def test_absence_is_never_an_error(self):
        for type_tag in ("integer", "json", "pem", "timeout", "duration", "list"):
            convert_as(None, "UNSET", type_tag)

    @pytest.mark.contract
    def test_duration_grammar_constraints(self):
        assert parse_duration_literal("2d 3d") == Failure("duplicate suffix: day")
        assert parse_duration_literal("3d 2h 100") == Success(
            [(TimeUnit.DAY, 3), (TimeUnit.HOUR, 2), (TimeUnit.MILLISECOND, 100)]
        )
        assert parse_duration_literal("100 3d") == Failure(
            "unsuffixed number must be at the end"
        )

    @pytest.mark.contract
    def test_conversion_is_deterministic(self):
        results = {
            repr(convert_as("a;b;c", "L", ("list", "atom"), delimiter=";"))
            for _ in range(5)
        }
        assert len(results) == 1
