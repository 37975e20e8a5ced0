"""
Similarity-based naming strategy.

Looks up how parameters in similar contexts were named elsewhere: the naming
context is embedded, the similarity index is queried for the nearest stored
contexts with the same parameter type, and the stored parameter names become
the candidates.

The strategy is not total. An empty corpus, a filter that removes every match,
or a failing embedder / index all produce an empty suggestion list, which
``suggest_one`` turns into the ``"param"`` fallback.
"""

import logging
from typing import AbstractSet, List

import httpx

from param_twin.analysis.context import NamingContext
from param_twin.errors import NamingServiceError
from param_twin.naming.base import first_usable
from param_twin.naming.embedding import Embedder
from param_twin.naming.index import SimilarityIndex

logger = logging.getLogger(__name__)

_QUOTES = "\"'`"


class SimilarityNamingStrategy:
  """
  Nearest-neighbour naming over a corpus of harvested parameter contexts.
  """

  label = "similarity-based"

  def __init__(self, embedder: Embedder, index: SimilarityIndex, count: int = 5) -> None:
    """
    Args:
        embedder: Embedding function for naming contexts.
        index: Similarity index populated with harvested contexts.
        count: Number of neighbours requested by ``suggest_one``.
    """
    self.embedder = embedder
    self.index = index
    self.count = count

  def suggest(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
    count: int = 1,
  ) -> List[str]:
    """
    Queries the index for up to ``count`` names.

    Args:
        original_name: Name of the parameter being duplicated (unused by the lookup).
        context: Naming context to embed.
        type_name: Only corpus entries with this ``paramType`` are considered.
        existing_names: Names that must not be returned.
        count: Number of neighbours to request.

    Returns:
        List[str]: Unused names in rank order; empty if nothing usable was found.
    """
    try:
      vector = self.embedder.embed(context.describe())
      matches = self.index.query(vector, top_k=count, filter={"paramType": type_name})
    except (NamingServiceError, httpx.HTTPError) as e:
      logger.warning("Name lookup for '%s' in %s failed: %s", original_name, context.procedure_name, e)
      return []

    names: List[str] = []
    for match in matches:
      name = match.param_name.strip().strip(_QUOTES)
      if not name or name in existing_names or name in names:
        continue
      names.append(name)
    return names[:count]

  def suggest_one(
    self,
    original_name: str,
    context: NamingContext,
    type_name: str,
    existing_names: AbstractSet[str],
  ) -> str:
    candidates = self.suggest(original_name, context, type_name, existing_names, self.count)
    return first_usable(candidates, existing_names)
