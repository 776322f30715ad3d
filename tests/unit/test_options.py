"""Unit tests for per-type option validation."""

import datetime
import decimal
import enum
import json
import logging
import math
import re

import pytest

from envcast.options import validate_options
from envcast.types import INFINITY, Duration, Failure, Success


class Color(enum.Enum):
    RED = "r"
    GREEN = "g"


class Shape(enum.Enum):
    CIRCLE = 1


def reason(type_tag, **options):
    result = validate_options(type_tag, options)
    assert isinstance(result, Failure), result
    return result.error


def config(type_tag, **options):
    result = validate_options(type_tag, options)
    assert isinstance(result, Success), result
    return result.value


class TestSymbolOptions:
    """``atom`` and ``safe_atom``."""

    @pytest.mark.unit
    def test_casefold_options(self):
        assert config("atom", downcase=True).downcase == "default"
        assert config("atom", upcase="ascii").upcase == "ascii"
        assert reason("atom", downcase=True, upcase=True) == (
            "`downcase` and `upcase` options both provided"
        )
        assert reason("atom", downcase="lower") == "invalid `downcase` value"
        assert reason("safe_atom", upcase=1) == "invalid `upcase` value"

    @pytest.mark.unit
    def test_casefold_is_checked_before_allowed(self):
        assert reason("atom", downcase="x", allowed=[]) == "invalid `downcase` value"

    @pytest.mark.unit
    def test_allowed(self):
        assert reason("atom", allowed=[]) == "`allowed` cannot be empty"
        assert reason("atom", allowed="red") == "`allowed` must be a symbol list"
        assert reason("atom", allowed=["red", 1]) == "`allowed` must be a symbol list"
        assert (
            reason("atom", allowed=[Color.RED, Shape.CIRCLE])
            == "`allowed` must be a symbol list"
        )
        assert config("atom", allowed=[Color.RED]).allowed == {"RED": Color.RED}

    @pytest.mark.unit
    def test_default(self):
        assert config("atom", default="x").default == "x"
        assert config("atom", default=Color.RED).default is Color.RED
        assert reason("atom", default=3) == "non-symbol `default` value"

    @pytest.mark.unit
    def test_default_must_be_allowed(self):
        assert config("atom", allowed=["on", "off"], default="off").default == "off"
        assert config("atom", allowed=list(Color), default="GREEN").default is Color.GREEN
        assert (
            reason("atom", allowed=["on", "off"], default="unset")
            == "`default` value 'unset' not present in `allowed`"
        )
        assert (
            reason("atom", allowed=[Color.RED], default=Color.GREEN)
            == "`default` value 'GREEN' not present in `allowed`"
        )


class TestModuleOptions:
    @pytest.mark.unit
    def test_allowed_modules(self):
        assert config("module", allowed=[json, re]).allowed == {"json": json, "re": re}
        assert reason("module", allowed=["json"]) == "`allowed` must be a module list"
        assert reason("safe_module", allowed=()) == "`allowed` cannot be empty"

    @pytest.mark.unit
    def test_default_module(self):
        assert config("module", default="json").default is json
        assert config("safe_module", default=json).default is json
        assert config("module", allowed=[json], default="json").default is json
        assert (
            reason("module", allowed=[json], default=re)
            == "`default` value 're' not present in `allowed`"
        )
        assert reason("module", default=1) == "non-module `default` value"
        assert (
            reason("safe_module", default="envcast_never_imported")
            == "non-module `default` value"
        )


class TestBooleanOptions:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = config("boolean")
        assert cfg.truthy == ("1", "true")
        assert cfg.falsy is None
        assert cfg.downcase is None
        assert cfg.default is False

    @pytest.mark.unit
    def test_matchers(self):
        assert config("boolean", falsy=["no"]).falsy == ("no",)
        assert reason("boolean", truthy=["y"], falsy=["n"]) == (
            "`truthy` and `falsy` options both provided"
        )
        assert reason("boolean", truthy=[]) == "invalid `truthy` value"
        assert reason("boolean", falsy="no") == "invalid `falsy` value"

    @pytest.mark.unit
    def test_matchers_are_checked_before_casefold(self):
        assert reason("boolean", truthy=["y"], falsy=["n"], downcase="bad") == (
            "`truthy` and `falsy` options both provided"
        )

    @pytest.mark.unit
    def test_casefold_and_default(self):
        assert config("boolean", downcase="turkic").downcase == "turkic"
        assert reason("boolean", downcase="upper") == "invalid `downcase` value"
        assert config("boolean", default=True).default is True
        assert reason("boolean", default="yes") == "non-boolean `default` value"


class TestNumericOptions:
    @pytest.mark.unit
    @pytest.mark.parametrize("base", [1, 37, True, "16", 2.0])
    def test_invalid_base(self, base):
        assert reason("integer", base=base) == (
            "invalid `base` value (must be an integer 2..36)"
        )

    @pytest.mark.unit
    def test_integer_default(self):
        assert config("integer", default=5).default == 5
        assert config("integer", base=16, default="ff").default == 255
        assert reason("integer", base=8, default="9") == (
            "non-integer `default` value for base 8"
        )
        assert reason("integer", default=1.5) == "non-integer `default` value"
        assert reason("integer", default=False) == "non-integer `default` value"

    @pytest.mark.unit
    def test_float_default(self):
        assert config("float", default=2).default == 2.0
        assert config("float", default="1.5e3").default == 1500.0
        assert reason("float", default="1.5x") == "non-float `default` value"
        assert reason("float", default=True) == "non-float `default` value"

    @pytest.mark.unit
    def test_decimal_default(self):
        assert config("decimal", default=0.1).default == decimal.Decimal("0.1")
        assert config("decimal", default="2.50").default == decimal.Decimal("2.50")
        assert reason("decimal", default="NaN") == "non-decimal `default` value"

    @pytest.mark.unit
    def test_charlist_default(self):
        assert config("charlist", default="ab").default == [97, 98]
        assert config("charlist", default=[99]).default == [99]
        assert reason("charlist", default=b"ab") == "non-charlist `default` value"


class TestOtherScalarOptions:
    @pytest.mark.unit
    def test_json(self):
        assert config("json", default={"a": [1]}).default == {"a": [1]}
        assert reason("json", default={1, 2}) == "non-JSON `default` value"
        assert reason("json", engine=42) == "invalid `engine` value"
        assert config("json").engine is json.loads

    @pytest.mark.unit
    def test_json_default_is_checked_before_engine(self):
        assert reason("json", default=object(), engine=42) == "non-JSON `default` value"

    @pytest.mark.unit
    def test_log_level(self):
        assert config("log_level", default="WARNING").default == logging.WARNING
        assert config("log_level", default=logging.DEBUG).default == logging.DEBUG
        assert reason("log_level", default="unknown") == "invalid `default` value unknown"
        assert reason("log_level", default=15) == "invalid `default` value 15"

    @pytest.mark.unit
    def test_code_types_take_no_options(self):
        assert isinstance(validate_options("literal", {"anything": 1}), Success)
        assert isinstance(validate_options("python", {}), Success)
        assert isinstance(validate_options("code_erlang", {}), Success)
        assert isinstance(validate_options("code_elixir", {"base": 1}), Success)

    @pytest.mark.unit
    def test_unknown_type(self):
        assert reason("uuid") == "unsupported conversion type"


class TestEncodedOptions:
    @pytest.mark.unit
    def test_defaults(self):
        assert config("base16").case == "upper"
        assert config("base32").case == "upper"
        assert config("hex32").case == "upper"
        assert config("hex32").padding is False
        b64 = config("base64")
        assert b64.ignore_whitespace is True
        assert b64.padding is False

    @pytest.mark.unit
    def test_invalid_values(self):
        assert reason("base16", case="title") == "invalid `case` value"
        assert reason("base32", padding="yes") == "invalid `padding` value"
        assert reason("url_base64", ignore_whitespace=1) == (
            "invalid `ignore_whitespace` value"
        )

    @pytest.mark.unit
    def test_list_defaults(self):
        cfg = config("list")
        assert cfg.delimiter == ","
        assert cfg.parts == INFINITY
        assert cfg.trim is False
        assert cfg.on == "first"
        assert cfg.include_captures is False
        assert cfg.default is None

    @pytest.mark.unit
    def test_list_values(self):
        pattern = re.compile(r"(?P<sep>;)")
        assert config("list", delimiter=[";", ","]).delimiter == (";", ",")
        assert config("list", delimiter=pattern, on=["sep"]).on == ("sep",)
        assert config("list", parts="infinity").parts == INFINITY
        assert config("list", parts=3).parts == 3
        assert config("list", default=("a",)).default == ["a"]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("options", "message"),
        [
            ({"delimiter": ""}, "invalid `delimiter` value"),
            ({"delimiter": [",", ""]}, "invalid `delimiter` value"),
            ({"delimiter": 1}, "invalid `delimiter` value"),
            ({"parts": 0}, "invalid `parts` value"),
            ({"parts": 1.5}, "invalid `parts` value"),
            ({"trim": "yes"}, "invalid `trim` value"),
            ({"on": "some"}, "invalid `on` value"),
            ({"on": [True]}, "invalid `on` value"),
            ({"delimiter": re.compile(";"), "on": ["sep"]}, "invalid `on` value"),
            ({"include_captures": 1}, "invalid `include_captures` value"),
            ({"default": "a,b"}, "non-list `default` value"),
        ],
    )
    def test_list_invalid(self, options, message):
        assert reason("list", **options) == message


class TestDurationOptions:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("default", "expected"),
        [
            (INFINITY, INFINITY),
            ("infinity", INFINITY),
            (3, 3),
            ("5", 5),
            ("5s", 5000),
            (Duration(seconds=5), 5000),
            (datetime.timedelta(minutes=1), 60_000),
            ({"seconds": 5, "minute": 1}, 65_000),
        ],
    )
    def test_timeout_default(self, default, expected):
        assert config("timeout", default=default).default == expected

    @pytest.mark.unit
    def test_timeout_default_is_infinity(self):
        assert math.isinf(config("timeout").default)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "default",
        [
            1.5,
            -1,
            [5],
            "X",
            "15s s",
            Duration(months=1),
            {"fortnights": 1},
            {"second": 1, "seconds": 2},
            {},
        ],
    )
    def test_invalid_timeout_default(self, default):
        assert reason("timeout", default=default) == "invalid timeout `default` value"

    @pytest.mark.unit
    def test_duration_default(self):
        assert config("duration").default is None
        assert config("duration", default="1h").default == Duration(hours=1)
        assert config("duration", default="P1M").default == Duration(months=1)
        assert config(
            "duration", default=datetime.timedelta(days=1, seconds=61)
        ).default == Duration(days=1, minutes=1, seconds=1)
        assert reason("duration", default=5) == "invalid duration `default` value"
        assert reason("duration", default="soon") == "invalid duration `default` value"
