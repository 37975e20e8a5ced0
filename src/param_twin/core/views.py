"""
Read-only views over function definitions.

``ProcedureView`` and ``ParameterView`` flatten the LibCST signature model
(positional-only, regular, ``*args``, keyword-only, ``**kwargs``) into one
ordered list, and split off the implicit receiver of methods so that
``def area(self, scale)`` counts as a single-parameter procedure.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import libcst as cst
from libcst.metadata import ClassScope

from param_twin.core.resolver import SemanticResolver
from param_twin.enums import ParamKind

Statement = Union[cst.BaseStatement, cst.BaseSmallStatement]

_SECTIONS = (
  ("posonly_params", ParamKind.POSITIONAL_ONLY),
  ("params", ParamKind.POSITIONAL),
  ("star_arg", ParamKind.VAR_POSITIONAL),
  ("kwonly_params", ParamKind.KEYWORD_ONLY),
  ("star_kwarg", ParamKind.VAR_KEYWORD),
)


@dataclass(frozen=True)
class ParameterView:
  """
  One declared parameter.

  Attributes:
      node: The LibCST parameter node (from the resolver's module).
      name: Parameter name.
      kind: Signature slot of the parameter.
      position: Index in the flattened parameter list (receiver included).
      section_index: Index inside its LibCST section (e.g. ``params[1]``).
  """

  node: cst.Param
  name: str
  kind: ParamKind
  position: int
  section_index: int

  @property
  def annotation(self) -> Optional[cst.Annotation]:
    return self.node.annotation


@dataclass(frozen=True)
class ProcedureView:
  """
  One ``def`` / ``async def``.

  Attributes:
      node: The function definition.
      name: Declared function name.
      parameters: Declared parameters, excluding the receiver.
      receiver: ``self`` / ``cls`` of methods, if present.
      body: Statements of the body, or None for stub bodies (``...`` only).
      docstring: Cleaned docstring, or empty string.
  """

  node: cst.FunctionDef
  name: str
  parameters: Tuple[ParameterView, ...]
  receiver: Optional[ParameterView]
  body: Optional[Tuple[Statement, ...]]
  docstring: str

  @classmethod
  def from_node(cls, node: cst.FunctionDef, resolver: SemanticResolver) -> "ProcedureView":
    """
    Builds a view of a function definition.

    Args:
        node: Function definition taken from ``resolver.module``.
        resolver: Semantic view used to decide whether the function is a method.

    Returns:
        ProcedureView: The read-only view.
    """
    flattened = _flatten_parameters(node.params)
    receiver = None
    if flattened and _takes_receiver(node, resolver) and flattened[0].kind in (
      ParamKind.POSITIONAL_ONLY,
      ParamKind.POSITIONAL,
    ):
      receiver = flattened[0]
      flattened = flattened[1:]

    return cls(
      node=node,
      name=node.name.value,
      parameters=tuple(flattened),
      receiver=receiver,
      body=_body_statements(node),
      docstring=node.get_docstring(clean=True) or "",
    )


def _flatten_parameters(params: cst.Parameters) -> List[ParameterView]:
  views: List[ParameterView] = []
  for section, kind in _SECTIONS:
    value = getattr(params, section)
    members = value if isinstance(value, (list, tuple)) else [value]
    for idx, member in enumerate(members):
      if not isinstance(member, cst.Param):
        continue
      views.append(
        ParameterView(node=member, name=member.name.value, kind=kind, position=len(views), section_index=idx)
      )
  return views


def _takes_receiver(node: cst.FunctionDef, resolver: SemanticResolver) -> bool:
  if not isinstance(resolver.scope_of(node.name), ClassScope):
    return False
  for decorator in node.decorators:
    target = decorator.decorator
    if isinstance(target, cst.Call):
      target = target.func
    if isinstance(target, cst.Name) and target.value == "staticmethod":
      return False
    if isinstance(target, cst.Attribute) and target.attr.value == "staticmethod":
      return False
  return True


def _body_statements(node: cst.FunctionDef) -> Optional[Tuple[Statement, ...]]:
  statements = tuple(node.body.body)
  if all(_is_stub(stmt) for stmt in statements):
    return None
  return statements


def _is_stub(stmt: Statement) -> bool:
  if isinstance(stmt, cst.SimpleStatementLine):
    return all(_is_stub(small) for small in stmt.body)
  return isinstance(stmt, cst.Expr) and isinstance(stmt.value, cst.Ellipsis)


class _FunctionCollector(cst.CSTVisitor):
  def __init__(self) -> None:
    self.functions: List[cst.FunctionDef] = []

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    self.functions.append(node)
    return True


def collect_functions(module: cst.Module) -> List[cst.FunctionDef]:
  """Lists every ``def`` of a module in pre-order (outer functions before the ones they contain)."""
  collector = _FunctionCollector()
  module.visit(collector)
  return collector.functions
