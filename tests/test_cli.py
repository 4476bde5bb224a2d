import json
import shutil

import pytest

from const_introspect.cli import config_from_arguments, parse_arguments
from const_introspect.extract_constants import main

needs_cc = pytest.mark.skipif(shutil.which("cc") is None, reason="cc not available")


def test_parse_arguments_defaults():
    args = parse_arguments(["stdio.h"])
    assert args.headers == ["stdio.h"]
    assert args.lang == "c"
    assert args.format == "json"
    assert args.output == "-"
    assert not args.resolve
    assert args.workers == 1


def test_config_from_arguments_splits_flags():
    args = parse_arguments(
        [
            "a.h",
            "b.h",
            "--lang",
            "c++",
            "--cc",
            "ccache c++",
            "--cflags=-O2 -g",
            "--extra-cflags=-I/opt/foo -DBAR='1 2'",
            "--filter",
            "^FOO",
        ]
    )
    config = config_from_arguments(args)
    assert config.headers == ["a.h", "b.h"]
    assert config.lang == "c++"
    assert config.cc == ["ccache", "c++"]
    assert config.cflags == ["-O2", "-g"]
    assert config.extra_cflags == ["-I/opt/foo", "-DBAR=1 2"]
    assert config.accepts("FOO_X")
    assert not config.accepts("BAR")


def test_include_underscore_keeps_everything():
    config = config_from_arguments(
        parse_arguments(["a.h", "--cc", "cc", "--cflags", "", "--include-underscore"])
    )
    assert config.accepts("_FOO")
    assert config.accepts("FOO")


@needs_cc
def test_main_writes_json(tmp_path, capsys):
    (tmp_path / "cli_test.h").write_text(
        '#define ANSWER 42\n#define NAME "bar"\n#define SUM (ANSWER + 1)\n'
    )
    main(
        [
            "cli_test.h",
            "--cc",
            "cc",
            "--cflags",
            "",
            f"--extra-cflags=-I{tmp_path}",
            "--filter",
            "^(ANSWER|NAME|SUM)$",
            "--resolve",
            "--log-level",
            "error",
        ]
    )
    output = json.loads(capsys.readouterr().out)
    constants = {c["name"]: c for c in output["constants"]}
    assert constants["ANSWER"] == {"name": "ANSWER", "raw_value": "42", "type": "int", "value": 42}
    assert constants["NAME"]["value"] == "bar"
    assert constants["SUM"]["type"] == "int"
    assert constants["SUM"]["value"] == 43


@needs_cc
def test_main_exits_on_missing_header(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["does_not_exist_anywhere.h", "--cc", "cc", "--cflags", "", "--log-level", "critical"])
    assert excinfo.value.code == 1
