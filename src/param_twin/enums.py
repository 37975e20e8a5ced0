"""
Enumerations for param-twin.
"""

from enum import Enum


class NamingStrategyKind(str, Enum):
  """
  Selector for the naming strategy used to name the duplicated parameter.
  """

  DETERMINISTIC = "deterministic"
  SIMILARITY = "similarity-based"


class ParamKind(str, Enum):
  """
  Syntactic slot a parameter occupies in a Python signature.
  """

  POSITIONAL_ONLY = "positional_only"
  POSITIONAL = "positional"
  VAR_POSITIONAL = "var_positional"  # *args
  KEYWORD_ONLY = "keyword_only"
  VAR_KEYWORD = "var_keyword"  # **kwargs


class ProcedureState(str, Enum):
  """
  States a procedure passes through while being rewritten.
  """

  SKIP = "skip"
  ELIGIBLE = "eligible"
  NAME_CHOSEN = "name_chosen"
  PARAMETER_DUPLICATED = "parameter_duplicated"
  USAGE_DUPLICATED = "usage_duplicated"
  DONE = "done"
