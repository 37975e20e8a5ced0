"""
Rewriter Package.

Splits the parameter duplication into three concerns:

- Signature: adding the twin parameter to a ``def``.
- Usage: locating and cloning the first statement that uses the parameter.
- Duplicator: planning every function of a module, then applying the plans.
"""

from param_twin.core.rewriter.duplicator import ParameterDuplicator, ProcedurePlan
from param_twin.core.rewriter.signature import append_twin_parameter
from param_twin.core.rewriter.usage import (
  ParameterRenamer,
  clone_with_rename,
  collect_references,
  enclosing_statement,
  locate_first_usage,
)

__all__ = [
  "ParameterDuplicator",
  "ProcedurePlan",
  "append_twin_parameter",
  "ParameterRenamer",
  "clone_with_rename",
  "collect_references",
  "enclosing_statement",
  "locate_first_usage",
]
