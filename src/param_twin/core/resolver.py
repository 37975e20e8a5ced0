"""
Semantic Resolver.

Wraps a parsed module together with the LibCST metadata needed to answer three
questions about it:

1.  **Declared symbol**: which variable does this binding node introduce?
    (``resolve_declared``)
2.  **Referenced symbol**: which variable does this identifier read?
    (``resolve_reference``)
3.  **Type name**: what is the canonical spelling of this annotation?
    (``resolve_type``)

A Python variable is a name inside one scope: every binding of ``x`` in the same
function body is the same variable. ``Symbol`` captures exactly that pair, so two
resolutions of the same declaration always compare equal, while a lambda
parameter or a comprehension variable that shadows ``x`` resolves to a
different ``Symbol``.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import (
  Assignment,
  ExpressionContext,
  ExpressionContextProvider,
  MetadataWrapper,
  ParentNodeProvider,
  QualifiedNameProvider,
  QualifiedNameSource,
  Scope,
  ScopeProvider,
)
from libcst.metadata.base_provider import LazyValue

BindingNode = Union[cst.Param, cst.Name, cst.FunctionDef, cst.ClassDef, cst.ImportAlias]


def _lookup(resolved: Mapping[cst.CSTNode, Any], node: cst.CSTNode, default: Any = None) -> Any:
  """
  Reads one value of a resolved metadata mapping.

  Some providers (``QualifiedNameProvider``) store ``LazyValue`` callables that
  compute the metadata on first use; those are evaluated here.
  """
  value = resolved.get(node, default)
  if isinstance(value, LazyValue):
    return value()
  return value


@dataclass(frozen=True)
class Symbol:
  """
  Resolver-assigned identity of one variable.
  """

  name: str
  scope: Scope = field(repr=False)


class SemanticResolver:
  """
  Read-only semantic view over a LibCST module.

  The resolver owns the module it was built from (``self.module``). Nodes passed
  to its methods must come from that module; freshly constructed nodes carry no
  metadata and resolve to ``None``.
  """

  def __init__(self, wrapper: MetadataWrapper) -> None:
    """
    Resolves all metadata providers eagerly.

    Args:
        wrapper: Metadata wrapper around the module to analyse.
    """
    self.wrapper = wrapper
    self.module = wrapper.module
    self._scopes = wrapper.resolve(ScopeProvider)
    self._contexts = wrapper.resolve(ExpressionContextProvider)
    self._qualified = wrapper.resolve(QualifiedNameProvider)
    self._parents = wrapper.resolve(ParentNodeProvider)

  @classmethod
  def from_source(cls, code: Union[str, bytes]) -> "SemanticResolver":
    """
    Parses source text and builds a resolver for it.

    Args:
        code: Python source code. Bytes are decoded as LibCST does, following
            a PEP 263 coding cookie when present.

    Returns:
        SemanticResolver: Resolver bound to the parsed module.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cls(MetadataWrapper(cst.parse_module(code)))

  # --- Tree navigation ---

  def parent_of(self, node: cst.CSTNode) -> Optional[cst.CSTNode]:
    return _lookup(self._parents, node)

  def scope_of(self, node: cst.CSTNode) -> Optional[Scope]:
    return _lookup(self._scopes, node)

  def is_store(self, node: cst.Name) -> bool:
    """True if the name is the target of a binding (assignment, loop, ``as``)."""
    return _lookup(self._contexts, node) == ExpressionContext.STORE

  # --- Symbols ---

  def resolve_declared(self, node: BindingNode) -> Optional[Symbol]:
    """
    Resolves the variable introduced by a binding node.

    Args:
        node: A ``Param``, a store-context ``Name``, a nested ``FunctionDef`` /
            ``ClassDef`` or an ``ImportAlias``.

    Returns:
        The declared Symbol, or None when the node has no scope information.
    """
    if isinstance(node, cst.Param):
      return self._find_assignment(node.name.value, node.name, node)
    if isinstance(node, (cst.FunctionDef, cst.ClassDef)):
      return self._find_assignment(node.name.value, node.name, node)
    if isinstance(node, cst.ImportAlias):
      scope = self.scope_of(node)
      if scope is None:
        return None
      if node.asname is not None:
        bound = cst.ensure_type(node.asname.name, cst.Name).value
      else:
        bound = node.evaluated_name.split(".")[0]
      return Symbol(bound, scope)
    if isinstance(node, cst.Name):
      return self._find_assignment(node.value, node, node)
    return None

  def _find_assignment(self, name: str, anchor: cst.CSTNode, declaration: cst.CSTNode) -> Optional[Symbol]:
    scope = self.scope_of(anchor)
    if scope is None:
      return None
    for assignment in scope[name]:
      if isinstance(assignment, Assignment) and assignment.node is declaration:
        return Symbol(name, assignment.scope)
    # Bindings LibCST does not record (e.g. walrus inside a comprehension)
    return Symbol(name, scope)

  def resolve_reference(self, node: cst.Name) -> Optional[Symbol]:
    """
    Resolves the variable a load-context identifier refers to.

    Args:
        node: The identifier being read.

    Returns:
        The referenced Symbol, or None if the name is not a variable access
        (attribute names, keyword argument names) or is undefined.
    """
    scope = self.scope_of(node)
    if scope is None:
      return None
    for access in scope.accesses[node.value]:
      if access.node is not node:
        continue
      for assignment in access.referents:
        return Symbol(node.value, assignment.scope)
      return None
    return None

  def symbol_of(self, node: cst.Name) -> Optional[Symbol]:
    """Resolves a name regardless of whether it is read or written."""
    if self.is_store(node):
      return self.resolve_declared(node)
    return self.resolve_reference(node)

  # --- Types ---

  def resolve_type(self, annotation: Optional[cst.Annotation]) -> Optional[str]:
    """
    Renders an annotation in canonical form.

    Names are replaced by their qualified name (``np.ndarray`` ->
    ``numpy.ndarray``, ``List`` -> ``typing.List``); builtins stay unqualified.

    Args:
        annotation: The annotation node of a parameter, if any.

    Returns:
        The canonical type name, or None if there is no annotation.
    """
    if annotation is None:
      return None
    rendered = self._render_type(annotation.annotation).strip()
    return rendered or None

  def _render_type(self, expr: cst.BaseExpression) -> str:
    if isinstance(expr, (cst.Name, cst.Attribute)):
      return self._qualify(expr)
    if isinstance(expr, cst.Subscript):
      parts = []
      for element in expr.slice:
        inner = element.slice
        if isinstance(inner, cst.Index):
          parts.append(self._render_type(inner.value))
        else:
          parts.append(self.module.code_for_node(inner))
      return f"{self._render_type(expr.value)}[{', '.join(parts)}]"
    if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
      return f"{self._render_type(expr.left)} | {self._render_type(expr.right)}"
    if isinstance(expr, (cst.List, cst.Tuple)):
      inner = ", ".join(self._render_type(el.value) for el in expr.elements)
      return f"[{inner}]" if isinstance(expr, cst.List) else f"({inner})"
    if isinstance(expr, cst.SimpleString):
      return str(expr.evaluated_value).strip()
    return self.module.code_for_node(expr)

  def _qualify(self, expr: Union[cst.Name, cst.Attribute]) -> str:
    qualified = _lookup(self._qualified, expr, set())
    if qualified:
      best = sorted(qualified, key=lambda q: q.name)[0]
      if best.source == QualifiedNameSource.BUILTIN:
        return best.name.replace("builtins.", "", 1)
      return best.name.replace(".<locals>", "")
    return get_full_name_for_node(expr) or self.module.code_for_node(expr)
