"""
Tests for the identifier scope collector.
"""

import pytest

from param_twin.analysis.scope_names import collect_scope_names
from param_twin.core.resolver import SemanticResolver
from param_twin.core.views import ProcedureView, collect_functions


def _names(code: str, index: int = 0):
  resolver = SemanticResolver.from_source(code)
  node = collect_functions(resolver.module)[index]
  return collect_scope_names(ProcedureView.from_node(node, resolver), resolver)


def test_includes_parameter_and_function_name():
  assert {"f", "x"} <= _names("def f(x): pass\n")


@pytest.mark.parametrize(
  "statement, expected",
  [
    ("y = 1", "y"),
    ("a, b = 1, 2", "b"),
    ("for item in x: pass", "item"),
    ("with open(x) as handle: pass", "handle"),
    ("import os.path", "os"),
    ("import numpy as np", "np"),
    ("from typing import List as L", "L"),
    ("class Inner: pass", "Inner"),
    ("def helper(z): pass", "z"),
    ("g = lambda q: q", "q"),
    ("total = [v for v in x]", "v"),
    ("global counter", "counter"),
    ("print(x)", "print"),
    ("return len(x)", "len"),
  ],
)
def test_binders_and_reads(statement, expected):
  code = f"def f(x):\n    {statement}\n"
  assert expected in _names(code)


def test_except_and_walrus_targets():
  code = "def f(x):\n    try:\n        pass\n    except ValueError as err:\n        pass\n    if (n := len(x)) > 1:\n        pass\n"
  names = _names(code)
  assert {"err", "n", "ValueError", "len"} <= names


def test_attribute_and_keyword_names_are_not_collected():
  names = _names("def f(x):\n    return g(key=x.field)\n")
  assert "key" not in names
  assert "field" not in names
  assert {"g", "x"} <= names


def test_annotations_and_defaults_are_read():
  names = _names("def f(x: Widget = DEFAULT): pass\n")
  assert {"Widget", "DEFAULT"} <= names


def test_receiver_is_collected():
  names = _names("class C:\n    def m(self, x):\n        return x\n")
  assert {"self", "x", "m"} <= names


def test_names_of_sibling_functions_are_not_collected():
  code = "def first(a):\n    local_one = a\n\ndef second(b):\n    return b\n"
  assert "local_one" not in _names(code, index=1)
