"""
Per-procedure analysis passes (scope names, naming context).
"""

from param_twin.analysis.context import NamingContext, build_naming_context, summarize_docstring
from param_twin.analysis.scope_names import ScopeNameCollector, collect_scope_names

__all__ = [
  "NamingContext",
  "build_naming_context",
  "summarize_docstring",
  "ScopeNameCollector",
  "collect_scope_names",
]
