"""
Tests for naming context construction.
"""

from param_twin.analysis.context import NamingContext, build_naming_context, summarize_docstring
from param_twin.core.resolver import SemanticResolver
from param_twin.core.views import ProcedureView, collect_functions


def _context(code: str) -> NamingContext:
  resolver = SemanticResolver.from_source(code)
  view = ProcedureView.from_node(collect_functions(resolver.module)[0], resolver)
  return build_naming_context(view, view.parameters[0], resolver)


def test_summary_is_first_paragraph():
  doc = "Computes the mean\nof the values.\n\nArgs:\n    values: Input."
  assert summarize_docstring(doc) == "Computes the mean of the values."


def test_summary_of_empty_docstring():
  assert summarize_docstring("") == ""
  assert summarize_docstring("\n\n") == ""


def test_context_of_annotated_parameter():
  code = 'import numpy as np\ndef mean(values: np.ndarray):\n    """Averages values."""\n    return values\n'
  context = _context(code)
  assert context == NamingContext(
    procedure_name="mean", type_name="numpy.ndarray", documentation_summary="Averages values."
  )


def test_unannotated_parameter_is_object():
  context = _context("def f(x): pass\n")
  assert context.type_name == "object"
  assert context.documentation_summary == ""


def test_describe_layout():
  context = NamingContext(procedure_name="clamp", type_name="int", documentation_summary="Clamps a value")
  assert context.describe() == "Method description: Clamps a value\nType: int in method clamp"


def test_method_context_uses_method_name():
  context = _context("class Shape:\n    def area(self, scale: float):\n        return scale\n")
  assert context.procedure_name == "area"
  assert context.type_name == "float"
