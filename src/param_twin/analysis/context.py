"""
Naming Context Builder.

Condenses a parameter into the short natural-language description consumed by
naming strategies: the owning function's name, the resolved parameter type and
the docstring summary of the function.
"""

from dataclasses import dataclass

from param_twin.core.resolver import SemanticResolver
from param_twin.core.views import ParameterView, ProcedureView

UNKNOWN_TYPE = "object"


@dataclass(frozen=True)
class NamingContext:
  """
  Immutable description of a parameter, used once to query a naming strategy.
  """

  procedure_name: str
  type_name: str
  documentation_summary: str

  def describe(self) -> str:
    """
    Renders the text that is embedded by the similarity-based strategy.

    The same layout is used when harvesting the naming corpus, so queries and
    stored entries stay comparable.
    """
    return f"Method description: {self.documentation_summary}\nType: {self.type_name} in method {self.procedure_name}"


def summarize_docstring(docstring: str) -> str:
  """
  Extracts the summary block of a docstring.

  The summary is the first paragraph (text up to the first blank line), with
  line breaks collapsed to single spaces.

  Args:
      docstring: A cleaned docstring (may be empty).

  Returns:
      str: The summary, or an empty string.
  """
  paragraph = []
  for line in docstring.strip().splitlines():
    if not line.strip():
      break
    paragraph.append(line.strip())
  return " ".join(paragraph)


def build_naming_context(
  procedure: ProcedureView, parameter: ParameterView, resolver: SemanticResolver
) -> NamingContext:
  """
  Builds the naming context of one parameter.

  Args:
      procedure: The function owning the parameter.
      parameter: The parameter being duplicated.
      resolver: Semantic view used to resolve the annotation.

  Returns:
      NamingContext: Context with ``"object"`` as type when the parameter is
      unannotated or the annotation cannot be rendered.
  """
  type_name = resolver.resolve_type(parameter.annotation) or UNKNOWN_TYPE
  return NamingContext(
    procedure_name=procedure.name,
    type_name=type_name,
    documentation_summary=summarize_docstring(procedure.docstring),
  )
