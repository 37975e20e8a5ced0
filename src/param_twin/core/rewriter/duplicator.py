"""
Rewrite Orchestrator.

Duplicates the parameter of every single-parameter function in a module.

The work is split in two phases so that every function is analysed against the
unmodified tree:

1.  **Plan** (``ParameterDuplicator.plan``): a pre-order walk over the parsed
    module. Each function runs through the states ``SKIP`` (parameter count is
    not 1) or ``ELIGIBLE`` -> ``NAME_CHOSEN``; the chosen name, the first usage
    of the parameter and the references it holds are stored in a
    ``ProcedurePlan``.
2.  **Apply** (``ParameterDuplicator.apply``): a ``CSTTransformer`` extends the
    parameter lists and inserts, after each usage statement, a renamed copy of
    it (``PARAMETER_DUPLICATED`` -> ``USAGE_DUPLICATED`` -> ``DONE``).

Nested functions are planned independently and in document order; the outer
function's changes never influence the analysis of an inner one. A usage is
only copied when it is a statement of the function's own body. The copy is
built during apply from the original statement with the plans of any function
defined inside it applied as well, so no single-parameter function is left
behind in the output.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Optional

import libcst as cst

from param_twin.analysis.context import build_naming_context
from param_twin.analysis.scope_names import collect_scope_names
from param_twin.core.resolver import SemanticResolver
from param_twin.core.rewriter.signature import append_twin_parameter
from param_twin.core.rewriter.usage import (
  ParameterRenamer,
  collect_references,
  locate_first_usage,
  without_leading_lines,
)
from param_twin.core.tracer import TraceLogger, get_tracer
from param_twin.core.views import ParameterView, ProcedureView, Statement, collect_functions
from param_twin.enums import ProcedureState
from param_twin.naming.base import NamingStrategy, first_usable


@dataclass
class ProcedurePlan:
  """
  Pending change to one function.

  Attributes:
      procedure: View of the function in the unmodified tree.
      parameter: The parameter being duplicated.
      new_name: Name of the twin parameter.
      usage: Statement of the function body holding the first reference to
          the parameter, if any.
      references: Names inside ``usage`` that resolve to the parameter.
      usage_inserted: Set by the apply phase once the renamed copy of ``usage``
          is in place.
  """

  procedure: ProcedureView
  parameter: ParameterView
  new_name: str
  usage: Optional[Statement] = None
  references: FrozenSet[cst.Name] = frozenset()
  usage_inserted: bool = False


class ParameterDuplicator:
  """
  Drives the analysis and mutation of one module.

  Attributes:
      found_any: True once an eligible function has been seen.
      changes_count: Number of functions rewritten by ``apply``.
  """

  def __init__(
    self,
    resolver: SemanticResolver,
    strategy: NamingStrategy,
    tracer: Optional[TraceLogger] = None,
  ) -> None:
    """
    Args:
        resolver: Semantic view of the module to rewrite.
        strategy: Naming strategy for the twin parameters.
        tracer: Trace sink (defaults to the global tracer).
    """
    self.resolver = resolver
    self.strategy = strategy
    self.tracer = tracer or get_tracer()
    self.found_any = False
    self.changes_count = 0
    self.plans: Dict[cst.FunctionDef, ProcedurePlan] = {}

  def plan(self) -> List[ProcedurePlan]:
    """
    Analyses every function of the module.

    Returns:
        List[ProcedurePlan]: Plans of the eligible functions, in document order.
    """
    ordered = []
    for node in collect_functions(self.resolver.module):
      plan = self._plan_procedure(node)
      if plan is not None:
        self.plans[node] = plan
        ordered.append(plan)
    return ordered

  def _plan_procedure(self, node: cst.FunctionDef) -> Optional[ProcedurePlan]:
    procedure = ProcedureView.from_node(node, self.resolver)
    if len(procedure.parameters) != 1:
      self.tracer.log_state(procedure.name, ProcedureState.SKIP, f"{len(procedure.parameters)} parameters")
      return None

    self.found_any = True
    parameter = procedure.parameters[0]
    self.tracer.log_state(procedure.name, ProcedureState.ELIGIBLE, parameter.name)

    existing = collect_scope_names(procedure, self.resolver)
    context = build_naming_context(procedure, parameter, self.resolver)
    suggested = self.strategy.suggest_one(parameter.name, context, context.type_name, existing)
    new_name = first_usable([suggested], existing)
    self.tracer.log_name(procedure.name, parameter.name, new_name, self.strategy.label)
    self.tracer.log_state(procedure.name, ProcedureState.NAME_CHOSEN, new_name)

    plan = ProcedurePlan(procedure=procedure, parameter=parameter, new_name=new_name)
    symbol = self.resolver.resolve_declared(parameter.node)
    if symbol is None:
      self.tracer.log_warning(f"Parameter '{parameter.name}' of {procedure.name} did not resolve")
    usage = locate_first_usage(procedure, parameter.name, symbol, self.resolver)
    if usage is None or symbol is None:
      return plan
    if usage not in procedure.body:
      self.tracer.log_warning(f"First use of '{parameter.name}' in {procedure.name} is not a body statement")
      return plan
    plan.usage = usage
    plan.references = collect_references(usage, parameter.name, symbol, self.resolver)
    return plan

  def apply(self) -> cst.Module:
    """
    Applies the computed plans.

    Returns:
        cst.Module: The rewritten module (the resolver's module is left intact).
    """
    if not self.plans:
      return self.resolver.module
    return self.resolver.module.visit(_PlanApplier(self))

  def run(self) -> cst.Module:
    """Plans and applies in one go."""
    self.plan()
    return self.apply()

  def _record_done(self, plan: ProcedurePlan) -> None:
    name = plan.procedure.name
    self.tracer.log_state(name, ProcedureState.PARAMETER_DUPLICATED, plan.new_name)
    if plan.usage_inserted:
      self.tracer.log_state(name, ProcedureState.USAGE_DUPLICATED)
    self.tracer.log_state(name, ProcedureState.DONE)
    self.changes_count += 1


class _PlanApplier(ParameterRenamer):
  """
  Writes the plans of a ``ParameterDuplicator`` into the tree.

  Plans are keyed by nodes of the unmodified tree, so lookups use
  ``original_node``; changes are applied to ``updated_node``. Blocks keep their
  length until their own ``leave_*`` runs, which lets copies be placed by index.

  Copies of usage statements are built by a nested, non-recording applier run
  over the original statement with the parameter's references added to
  ``renames``. Functions defined inside the copy get their twins as well.
  """

  def __init__(
    self,
    duplicator: ParameterDuplicator,
    renames: Optional[Mapping[cst.Name, str]] = None,
    record: bool = True,
    usages: Optional[Dict[cst.CSTNode, List[ProcedurePlan]]] = None,
  ) -> None:
    super().__init__(renames or {})
    self.duplicator = duplicator
    self.tracer = duplicator.tracer
    self.record = record
    if usages is None:
      usages = {}
      for plan in duplicator.plans.values():
        if plan.usage is not None:
          usages.setdefault(plan.usage, []).append(plan)
    self._usages = usages

  def _copy_of(self, plan: ProcedurePlan) -> Statement:
    renames = dict(self.renames)
    renames.update(dict.fromkeys(plan.references, plan.new_name))
    builder = _PlanApplier(self.duplicator, renames, record=False, usages=self._usages)
    return without_leading_lines(plan.usage.visit(builder))

  def _with_copies(self, original_body, updated_body) -> list:
    body = []
    for idx, statement in enumerate(original_body):
      body.append(updated_body[idx])
      for plan in self._usages.get(statement, ()):
        body.append(self._copy_of(plan))
        if self.record:
          plan.usage_inserted = True
    return body

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock, updated_node: cst.IndentedBlock) -> cst.IndentedBlock:
    if not any(statement in self._usages for statement in original_node.body):
      return updated_node
    return updated_node.with_changes(body=self._with_copies(original_node.body, updated_node.body))

  def leave_SimpleStatementSuite(
    self, original_node: cst.SimpleStatementSuite, updated_node: cst.SimpleStatementSuite
  ) -> cst.SimpleStatementSuite:
    if not any(statement in self._usages for statement in original_node.body):
      return updated_node
    return updated_node.with_changes(body=self._with_copies(original_node.body, updated_node.body))

  def leave_FunctionDef(self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef) -> cst.FunctionDef:
    plan = self.duplicator.plans.get(original_node)
    if plan is None:
      return updated_node

    result = append_twin_parameter(updated_node, plan.parameter, plan.new_name)
    if self.record:
      self.tracer.log_mutation(
        "FunctionDef",
        f"def {plan.procedure.name}({plan.parameter.name})",
        f"def {plan.procedure.name}({plan.parameter.name}, {plan.new_name})",
      )
      self.duplicator._record_done(plan)
    return result
