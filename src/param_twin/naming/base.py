"""
Naming Strategy contract.

A naming strategy proposes identifiers for the duplicated parameter. Two
implementations exist (``DeterministicNamingStrategy`` and
``SimilarityNamingStrategy``); both satisfy the ``NamingStrategy`` protocol and
share the validation and fallback rules defined here.

The suffix sequence ``x2``, ``xCopy``, ``x_copy``, ``x_1`` ... ``x_999``,
``x_dup1``, ``x_dup2``, ... also lives here: it drives the deterministic
strategy and resolves collisions of the ``"param"`` fallback.
"""

import keyword
from itertools import count as _count
from typing import AbstractSet, Iterable, Iterator, List, Protocol

from param_twin.analysis.context import NamingContext

FALLBACK_NAME = "param"

_NUMBERED_LIMIT = 1000


class NamingStrategy(Protocol):
  """Capability implemented by every naming strategy."""

  #: Short label used in traces and logs.
  label: str

  def suggest(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
    count: int = 1,
  ) -> List[str]:
    """
    Returns up to ``count`` candidate names, best first.
    """
    ...

  def suggest_one(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
  ) -> str:
    """
    Returns a single usable name; never fails.
    """
    ...


def is_valid_identifier(name: str) -> bool:
  """
  Checks that a string can be used as a Python parameter name.

  Args:
      name: Candidate name.

  Returns:
      bool: True for non-keyword identifiers.
  """
  return bool(name) and name.isidentifier() and not keyword.iskeyword(name)


def candidate_names(base: str) -> Iterator[str]:
  """
  Yields the (infinite) suffix sequence for a base name.

  Args:
      base: The original parameter name.
  """
  yield f"{base}2"
  yield f"{base}Copy"
  yield f"{base}_copy"
  for i in range(1, _NUMBERED_LIMIT):
    yield f"{base}_{i}"
  for i in _count(1):
    yield f"{base}_dup{i}"


def next_free_name(base: str, existing_names: AbstractSet[str]) -> str:
  """
  Returns the first candidate of ``base`` that is not in ``existing_names``.

  Terminates because the ``_dupN`` tail is unbounded while ``existing_names``
  is finite.
  """
  base = base.strip() or FALLBACK_NAME
  for candidate in candidate_names(base):
    if candidate not in existing_names:
      return candidate
  raise AssertionError("unreachable: candidate sequence is infinite")


def first_usable(candidates: Iterable[str], existing_names: AbstractSet[str]) -> str:
  """
  Picks the first valid, unused candidate or falls back to ``"param"``.

  If ``"param"`` itself is taken, the suffix sequence of ``"param"`` is used
  (``param2``, ``paramCopy``, ...) so the result never collides.

  Args:
      candidates: Ranked candidate names.
      existing_names: Names already bound in the function.

  Returns:
      str: A valid identifier not in ``existing_names``.
  """
  for candidate in candidates:
    if isinstance(candidate, str) and is_valid_identifier(candidate) and candidate not in existing_names:
      return candidate
  if FALLBACK_NAME not in existing_names:
    return FALLBACK_NAME
  return next_free_name(FALLBACK_NAME, existing_names)
