"""
Reference Locator & Statement Cloning.

Finds the first statement of a function body that uses a parameter and builds
a copy of it that uses the duplicated parameter instead.

Both operations compare *symbols*, not text: a ``Name`` only counts as a use of
the parameter if the ``SemanticResolver`` maps it to the parameter's ``Symbol``.
A lambda parameter, a comprehension variable or a nested function's local with
the same spelling is a different symbol and is neither located nor renamed.

Statements are the nodes held directly by a block:

*   an ``IndentedBlock`` holds simple statement lines and compound statements
    (a reference in the header of ``if x:`` selects the whole ``if``);
*   a one-line suite (``if c: a = x; b = 1``) holds small statements.
"""

from typing import FrozenSet, List, Mapping, Optional, Union

import libcst as cst

from param_twin.core.resolver import SemanticResolver, Symbol
from param_twin.core.views import ProcedureView, Statement

_BLOCKS = (cst.IndentedBlock, cst.SimpleStatementSuite, cst.Module)


class _FirstReferenceFinder(cst.CSTVisitor):
  """Pre-order search for the first name bound to a given symbol."""

  def __init__(self, name: str, symbol: Symbol, resolver: SemanticResolver) -> None:
    self.name = name
    self.symbol = symbol
    self.resolver = resolver
    self.found: Optional[cst.Name] = None

  def on_visit(self, node: cst.CSTNode) -> bool:
    if self.found is not None:
      return False
    return super().on_visit(node)

  def visit_Name(self, node: cst.Name) -> Optional[bool]:
    if node.value == self.name and self.resolver.symbol_of(node) == self.symbol:
      self.found = node
    return False


class _ReferenceCollector(cst.CSTVisitor):
  """Gathers every name bound to a given symbol."""

  def __init__(self, name: str, symbol: Symbol, resolver: SemanticResolver) -> None:
    self.name = name
    self.symbol = symbol
    self.resolver = resolver
    self.found: List[cst.Name] = []

  def visit_Name(self, node: cst.Name) -> Optional[bool]:
    if node.value == self.name and self.resolver.symbol_of(node) == self.symbol:
      self.found.append(node)
    return False


class ParameterRenamer(cst.CSTTransformer):
  """
  Renames a fixed set of ``Name`` nodes.

  ``renames`` maps nodes of the resolver's module to their new spelling; it is
  usually built with ``collect_references``. Lookups use ``original_node``, so
  the renamer must be run over the nodes the map was built from.
  """

  def __init__(self, renames: Mapping[cst.Name, str]) -> None:
    self.renames = renames
    self.renamed = 0

  def leave_Name(self, original_node: cst.Name, updated_node: cst.Name) -> cst.Name:
    new_name = self.renames.get(original_node)
    if new_name is None:
      return updated_node
    self.renamed += 1
    return updated_node.with_changes(value=new_name)


def enclosing_statement(node: cst.CSTNode, resolver: SemanticResolver) -> Optional[Statement]:
  """
  Returns the smallest statement containing ``node``.

  Args:
      node: Any node of the resolver's module.
      resolver: Provides the parent links.

  Returns:
      The ancestor (or ``node`` itself) that is an element of a block, or None
      if ``node`` is not inside a module body.
  """
  current = node
  parent = resolver.parent_of(current)
  while parent is not None:
    if isinstance(parent, _BLOCKS) and current in parent.body:
      return current
    current = parent
    parent = resolver.parent_of(current)
  return None


def locate_first_usage(
  procedure: ProcedureView,
  original_name: str,
  parameter_symbol: Optional[Symbol],
  resolver: SemanticResolver,
) -> Optional[Statement]:
  """
  Finds the statement holding the first reference to a parameter.

  The body is searched in document order; the walk descends into nested
  functions, lambdas and classes, where the resolver decides whether a name
  still refers to the parameter.

  Args:
      procedure: The function owning the parameter.
      original_name: Name of the parameter.
      parameter_symbol: Declared symbol of the parameter.
      resolver: Semantic view of the module.

  Returns:
      The smallest statement enclosing the first confirmed reference, or None
      if the body is absent, the parameter did not resolve, or it is unused.
  """
  if procedure.body is None or parameter_symbol is None:
    return None

  finder = _FirstReferenceFinder(original_name, parameter_symbol, resolver)
  for statement in procedure.body:
    statement.visit(finder)
    if finder.found is not None:
      return enclosing_statement(finder.found, resolver)
  return None


def clone_with_rename(
  statement: Statement,
  original_name: str,
  new_name: str,
  parameter_symbol: Symbol,
  resolver: SemanticResolver,
) -> Union[cst.BaseStatement, cst.BaseSmallStatement]:
  """
  Copies a statement with the parameter rebound to ``new_name``.

  Leading comments and blank lines of the statement are not copied.

  Args:
      statement: Statement of the resolver's module.
      original_name: Name of the parameter.
      new_name: Name of the duplicated parameter.
      parameter_symbol: Declared symbol of the parameter.
      resolver: Semantic view of the module.

  Returns:
      A new statement node, structurally equal to ``statement`` except for the
      renamed references.
  """
  targets = collect_references(statement, original_name, parameter_symbol, resolver)
  renamer = ParameterRenamer(dict.fromkeys(targets, new_name))
  return without_leading_lines(statement.visit(renamer))


def without_leading_lines(statement: Statement) -> Statement:
  """Drops the comments and blank lines attached above a statement."""
  if hasattr(statement, "leading_lines"):
    return statement.with_changes(leading_lines=())
  return statement


def collect_references(
  statement: Statement,
  original_name: str,
  parameter_symbol: Symbol,
  resolver: SemanticResolver,
) -> FrozenSet[cst.Name]:
  """
  Returns the names inside ``statement`` that resolve to the parameter.

  The result holds nodes of the resolver's module, so it stays valid as a
  rename target list after the module has been rewritten around them.
  """
  collector = _ReferenceCollector(original_name, parameter_symbol, resolver)
  statement.visit(collector)
  return frozenset(collector.found)
