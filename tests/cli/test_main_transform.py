"""
Tests for the ``param-twin`` command.

Verifies exit codes (0 success, 1 usage / configuration / parse errors,
2 missing input), output placement and the user-facing messages.
"""

import json
from unittest.mock import patch

import pytest

from param_twin.cli.__main__ import main
from param_twin.cli.handlers.transform import NOTHING_FOUND_MESSAGE


@pytest.fixture
def no_credentials(monkeypatch):
  for name in ("PARAM_TWIN_INDEX_API_KEY", "PINECONE_API_KEY", "PARAM_TWIN_INDEX_HOST"):
    monkeypatch.delenv(name, raising=False)


@pytest.fixture
def source(tmp_path):
  path = tmp_path / "sample.py"
  path.write_text("def abs_(value: int):\n    return -value if value < 0 else value\n", encoding="utf-8")
  return path


def test_overwrites_input_by_default(source, recorded_console):
  assert main([str(source), "--strategy", "deterministic"]) == 0
  assert source.read_text(encoding="utf-8").startswith("def abs_(value: int, value2: int):")
  assert "Processed file. Functions changed: 1." in recorded_console.export_text()


def test_writes_to_output_path(source, tmp_path, recorded_console):
  out = tmp_path / "out.py"
  assert main([str(source), str(out), "--strategy", "deterministic"]) == 0
  assert "value2" in out.read_text(encoding="utf-8")
  assert "value2" not in source.read_text(encoding="utf-8")


def test_nothing_found_message(tmp_path, recorded_console):
  path = tmp_path / "pair.py"
  path.write_text("def add(a, b):\n    return a + b\n", encoding="utf-8")
  assert main([str(path), "--strategy", "deterministic"]) == 0
  assert NOTHING_FOUND_MESSAGE in recorded_console.export_text()


def test_missing_input_exits_with_2(tmp_path, recorded_console):
  assert main([str(tmp_path / "missing.py"), "--strategy", "deterministic"]) == 2
  assert "Input file not found" in recorded_console.export_text()


def test_parse_error_exits_with_1(tmp_path, recorded_console):
  path = tmp_path / "broken.py"
  path.write_text("def broken(:\n", encoding="utf-8")
  assert main([str(path), "--strategy", "deterministic"]) == 1
  assert path.read_text(encoding="utf-8") == "def broken(:\n"


def test_missing_credentials_exit_with_1(source, no_credentials, recorded_console):
  assert main([str(source), "--strategy", "similarity-based"]) == 1
  assert "PARAM_TWIN_INDEX_API_KEY" in recorded_console.export_text()
  assert "value2" not in source.read_text(encoding="utf-8")


def test_missing_input_checked_before_credentials(tmp_path, no_credentials, recorded_console):
  assert main([str(tmp_path / "missing.py")]) == 2


def test_local_corpus_replaces_remote_index(source, corpus_file, no_credentials, recorded_console):
  assert main([str(source), "--strategy", "similarity-based", "--corpus", str(corpus_file)]) == 0
  assert "def abs_(value: int, upper: int):" in source.read_text(encoding="utf-8")


def test_json_trace_is_written(source, tmp_path, recorded_console):
  trace = tmp_path / "trace" / "run.json"
  assert main([str(source), "--strategy", "deterministic", "--json-trace", str(trace)]) == 0
  events = json.loads(trace.read_text(encoding="utf-8"))
  assert any(e["type"] == "name_chosen" and e["metadata"]["chosen"] == "value2" for e in events)


def test_unreadable_corpus_exits_with_1(source, tmp_path, no_credentials, recorded_console):
  corpus = tmp_path / "corpus.json"
  corpus.write_text("{broken", encoding="utf-8")
  assert main([str(source), "--strategy", "similarity-based", "--corpus", str(corpus)]) == 1
  assert "Cannot read similarity index" in recorded_console.export_text()
  assert "value: int," not in source.read_text(encoding="utf-8")


def test_coding_cookie_is_honoured(tmp_path, recorded_console):
  path = tmp_path / "latin.py"
  path.write_bytes("# -*- coding: latin-1 -*-\ndef greet(name):\n    return 'caf\u00e9 ' + name\n".encode("latin-1"))

  assert main([str(path), "--strategy", "deterministic"]) == 0
  assert path.read_bytes().decode("latin-1") == (
    "# -*- coding: latin-1 -*-\n"
    "def greet(name, name2):\n"
    "    return 'caf\u00e9 ' + name\n"
    "    return 'caf\u00e9 ' + name2\n"
  )


def test_undecodable_input_exits_with_1(tmp_path, recorded_console):
  path = tmp_path / "bad.py"
  content = b"def f(x):\n    return '\xe9'\n"
  path.write_bytes(content)
  assert main([str(path), "--strategy", "deterministic"]) == 1
  assert path.read_bytes() == content


@pytest.mark.parametrize("argv", [[], ["a.py", "--strategy", "random"], ["a.py", "--count", "0"]])
def test_usage_errors_exit_with_1(argv, capsys):
  assert main(argv) == 1


def test_version_exits_with_0(capsys):
  assert main(["--version"]) == 0
  assert "param-twin" in capsys.readouterr().out


@patch("param_twin.cli.commands.handle_transform", return_value=0)
def test_arguments_are_forwarded(mock_handle, tmp_path):
  main(["in.py", "out.py", "--strategy", "deterministic", "--count", "3", "--corpus", "c.json"])

  mock_handle.assert_called_once()
  args = mock_handle.call_args[0]
  assert str(args[0]) == "in.py"
  assert str(args[1]) == "out.py"
  assert args[2] == "deterministic"
  assert args[3] == 3
  assert str(args[4]) == "c.json"
  assert args[5] is None
