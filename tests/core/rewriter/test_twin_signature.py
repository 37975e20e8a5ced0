"""
Tests for twin parameter placement in function signatures.

Verifies:
1.  The twin follows the original in its own section and copies annotation/default.
2.  ``*args`` and ``**kwargs`` produce keyword-only twins.
3.  Multi-line signatures keep one parameter per line and their trailing comma.
"""

import libcst as cst
import pytest

from param_twin.core.resolver import SemanticResolver
from param_twin.core.rewriter.signature import append_twin_parameter
from param_twin.core.views import ProcedureView, collect_functions


def _rewrite_signature(code: str, new_name: str) -> str:
  resolver = SemanticResolver.from_source(code)
  func = collect_functions(resolver.module)[-1]
  view = ProcedureView.from_node(func, resolver)
  (parameter,) = view.parameters
  result = append_twin_parameter(func, parameter, new_name)
  return resolver.module.code_for_node(result)


@pytest.mark.parametrize(
  "source, expected",
  [
    ("def f(x): pass\n", "def f(x, x2): pass\n"),
    ("def f(x: int = 1): pass\n", "def f(x: int = 1, x2: int = 1): pass\n"),
    ("def f(x, /): pass\n", "def f(x, x2, /): pass\n"),
    ("def f(*, x): pass\n", "def f(*, x, x2): pass\n"),
    ("def f(*args): pass\n", "def f(*args, x2): pass\n"),
    ("def f(*args: int): pass\n", "def f(*args: int, x2: int): pass\n"),
    ("def f(**kw): pass\n", "def f(*, x2, **kw): pass\n"),
    ("def f(x,): pass\n", "def f(x, x2,): pass\n"),
  ],
)
def test_single_line_placement(source, expected):
  assert _rewrite_signature(source, "x2") == expected


def test_method_twin_follows_parameter_not_receiver():
  code = "class C:\n  def m(self, x): pass\n"
  assert _rewrite_signature(code, "x2") == "def m(self, x, x2): pass\n"


def test_multiline_with_trailing_comma():
  code = "def f(\n    x: int,\n):\n    pass\n"
  assert _rewrite_signature(code, "y") == "def f(\n    x: int,\n    y: int,\n):\n    pass\n"


def test_multiline_without_trailing_comma():
  code = "def f(\n    x\n):\n    pass\n"
  assert _rewrite_signature(code, "y") == "def f(\n    x,\n    y\n):\n    pass\n"


def test_result_is_valid_python():
  rendered = _rewrite_signature("async def f(*args): pass\n", "extra")
  cst.parse_module(rendered)
  assert rendered == "async def f(*args, extra): pass\n"
