"""
Deterministic naming strategy.
"""

from typing import AbstractSet, List

from param_twin.analysis.context import NamingContext
from param_twin.naming.base import FALLBACK_NAME, candidate_names, first_usable


class DeterministicNamingStrategy:
  """
  Suffix-based naming. Total and collision free.

  Context and type are ignored; only the original name drives the result.
  """

  label = "deterministic"

  def suggest(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
    count: int = 1,
  ) -> List[str]:
    base = original_name.strip() or FALLBACK_NAME
    names: List[str] = []
    if count <= 0:
      return names
    for candidate in candidate_names(base):
      if candidate in existing_names:
        continue
      names.append(candidate)
      if len(names) >= count:
        break
    return names

  def suggest_one(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
  ) -> str:
    return first_usable(self.suggest(original_name, context, type_name, existing_names, 1), existing_names)
