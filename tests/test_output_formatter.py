import json

from const_introspect.model import Constant, DiscoveryConfig
from const_introspect.output_formatter import (
    c_string_literal,
    format_output_header,
    format_output_json,
    format_output_text,
    write_output,
)


def make_constants():
    return [
        Constant("INT_VAL", raw_value="1", type="int", value=1),
        Constant("LONG_VAL", raw_value="(1L << 33)", type="long", value=1 << 33),
        Constant("FLOAT_VAL", raw_value="1.3f", type="float", value="1.3"),
        Constant("DOUBLE_VAL", raw_value="(1.0 * 2)", type="double", value=2.0),
        Constant("STR_VAL", raw_value='"a\\"b"', type="string", value='a"b'),
        Constant("PTR_VAL", raw_value="((void*)0)", type="pointer", value=None),
        Constant("CODE_VAL", raw_value="do { } while (0)", type="other"),
    ]


def make_config():
    return DiscoveryConfig(headers=["foo.h"], cc=["cc"], cflags=[])


def test_json_output():
    output = json.loads(format_output_json(make_config(), make_constants()))

    assert output["config"]["headers"] == ["foo.h"]
    assert output["config"]["lang"] == "c"
    assert output["config"]["filter"] == "public_name"
    assert output["constants"][0] == {
        "name": "INT_VAL",
        "raw_value": "1",
        "type": "int",
        "value": 1,
    }
    assert output["constants"][-1]["type"] == "other"
    assert output["constants"][-1]["value"] is None


def test_text_output_groups_by_type():
    text = format_output_text(make_config(), make_constants())
    assert text.startswith("CONSTANT DEFINITIONS")
    assert "int (1 constants)" in text
    assert "other (1 constants)" in text
    assert "| INT_VAL " in text
    # Group order follows the type enumeration.
    assert text.index("int (1 constants)") < text.index("string (1 constants)")


def test_header_output():
    header = format_output_header(make_config(), make_constants())
    assert "#define INT_VAL 1\n" in header
    assert "#define LONG_VAL 8589934592L\n" in header
    assert "#define FLOAT_VAL 1.3f\n" in header
    assert "#define DOUBLE_VAL 2.0\n" in header
    assert '#define STR_VAL "a\\"b"\n' in header
    assert "/* PTR_VAL: pointer, value not reproducible */" in header
    assert "/* CODE_VAL: not a constant */" in header
    assert header.rstrip().endswith("#endif /* _CONST_INTROSPECT_H */")


def test_c_string_literal_escapes():
    assert c_string_literal("plain") == '"plain"'
    assert c_string_literal('a"b\\c') == '"a\\"b\\\\c"'
    assert c_string_literal("line\nnext\x01") == '"line\\nnext\\001"'


def test_write_output_replaces_extension(tmp_path):
    write_output("{}", str(tmp_path / "constants.out"), "json")
    assert (tmp_path / "constants.json").read_text() == "{}"


def test_write_output_stdout(capsys):
    write_output("hello", "-", "text")
    assert capsys.readouterr().out == "hello\n"


def test_header_output_skips_non_finite_values():
    """inf and nan have no C literal and are written as comments."""
    constants = [
        Constant("HUGE", raw_value="HUGE_VAL", type="double", value=float("inf")),
        Constant("NOT_A_NUMBER", raw_value="NAN", type="float", value=float("nan")),
        Constant("HALF", raw_value="0.5f", type="float", value="0.5"),
    ]
    header = format_output_header(make_config(), constants)
    assert "/* HUGE: double inf has no C literal */" in header
    assert "/* NOT_A_NUMBER: float nan has no C literal */" in header
    assert "#define HALF 0.5f\n" in header
    assert "#define HUGE" not in header
    assert "#define NOT_A_NUMBER" not in header
