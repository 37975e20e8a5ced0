"""
Identifier Scope Collector.

Gathers every name a new parameter of a function must not reuse:

1.  **Binders**: parameters (of the function, nested functions and lambdas),
    assignment / loop / comprehension / walrus targets, ``except ... as`` and
    ``with ... as`` names, nested ``def`` / ``class`` names, import aliases and
    ``global`` / ``nonlocal`` declarations. Each binder is resolved through the
    ``SemanticResolver`` so the recorded name is the one of the declared symbol.
2.  **Free names**: every identifier the function reads (globals, builtins,
    closure variables, ``match`` captures) plus the function's own name. A
    parameter with one of these names would shadow them inside the body.

The collector walks the whole function subtree, not just the body, and is a
pure function of its inputs.
"""

from typing import Optional, Set

import libcst as cst

from param_twin.core.resolver import SemanticResolver, Symbol
from param_twin.core.views import ProcedureView


class ScopeNameCollector(cst.CSTVisitor):
  """
  Visitor accumulating the names bound or read inside one function.
  """

  def __init__(self, resolver: SemanticResolver) -> None:
    """
    Args:
        resolver: Semantic view of the module being analysed.
    """
    self.resolver = resolver
    self.names: Set[str] = set()

  def _add(self, symbol: Optional[Symbol], fallback: str) -> None:
    self.names.add(symbol.name if symbol is not None else fallback)

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    self._add(self.resolver.resolve_declared(node), node.name.value)
    return True

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    self._add(self.resolver.resolve_declared(node), node.name.value)
    return True

  def visit_Param(self, node: cst.Param) -> Optional[bool]:
    self._add(self.resolver.resolve_declared(node), node.name.value)
    # Annotations and defaults may read further names.
    for child in (node.annotation, node.default):
      if child is not None:
        child.visit(self)
    return False

  def visit_Name(self, node: cst.Name) -> Optional[bool]:
    if self.resolver.is_store(node):
      self._add(self.resolver.resolve_declared(node), node.value)
    else:
      self.names.add(node.value)
    return False

  def visit_ImportAlias(self, node: cst.ImportAlias) -> Optional[bool]:
    symbol = self.resolver.resolve_declared(node)
    fallback = node.evaluated_alias or node.evaluated_name.split(".")[0]
    self._add(symbol, fallback)
    return False

  def visit_Global(self, node: cst.Global) -> Optional[bool]:
    self.names.update(item.name.value for item in node.names)
    return False

  def visit_Nonlocal(self, node: cst.Nonlocal) -> Optional[bool]:
    self.names.update(item.name.value for item in node.names)
    return False

  def visit_Attribute(self, node: cst.Attribute) -> Optional[bool]:
    # ``obj.attr``: only ``obj`` is a variable
    node.value.visit(self)
    return False

  def visit_Arg(self, node: cst.Arg) -> Optional[bool]:
    # ``f(key=value)``: ``key`` is not a variable
    node.value.visit(self)
    return False


def collect_scope_names(procedure: ProcedureView, resolver: SemanticResolver) -> Set[str]:
  """
  Collects the names already taken inside a function.

  Args:
      procedure: The function to analyse.
      resolver: Semantic view of the module the function belongs to.

  Returns:
      Set[str]: A fresh set; always contains every parameter name and the
      function name itself.
  """
  collector = ScopeNameCollector(resolver)
  procedure.node.visit(collector)
  return collector.names
