"""
Tests for the similarity-based naming strategy.

The embedder and index are mocked; see ``test_similarity_index.py`` for the
index implementations.
"""

from unittest.mock import MagicMock

import httpx
import numpy as np

from param_twin.analysis.context import NamingContext
from param_twin.errors import NamingServiceError
from param_twin.naming import HashingEmbedder, LocalSimilarityIndex
from param_twin.naming.index import IndexMatch
from param_twin.naming.similarity import SimilarityNamingStrategy

CONTEXT = NamingContext(procedure_name="clamp", type_name="int", documentation_summary="Clamps a value")


def _strategy(matches, count=5):
  embedder = MagicMock()
  embedder.embed.return_value = np.ones(4, dtype=np.float32)
  index = MagicMock()
  index.query.return_value = [IndexMatch(param_name=name, score=1.0) for name in matches]
  return SimilarityNamingStrategy(embedder, index, count=count), embedder, index


def test_query_uses_context_and_type_filter():
  strategy, embedder, index = _strategy(["upper"])
  assert strategy.suggest_one("value", CONTEXT, "int", {"value"}) == "upper"

  embedder.embed.assert_called_once_with(CONTEXT.describe())
  _, kwargs = index.query.call_args
  assert kwargs["top_k"] == 5
  assert kwargs["filter"] == {"paramType": "int"}


def test_taken_and_duplicate_names_are_dropped():
  strategy, _, _ = _strategy(["value", "'upper'", "upper", " limit "])
  assert strategy.suggest("value", CONTEXT, "int", {"value"}, count=5) == ["upper", "limit"]


def test_invalid_candidates_fall_back():
  strategy, _, _ = _strategy(["class", "not valid"])
  assert strategy.suggest_one("value", CONTEXT, "int", {"value"}) == "param"


def test_empty_result_falls_back_to_param():
  strategy, _, _ = _strategy([])
  assert strategy.suggest_one("value", CONTEXT, "int", {"value"}) == "param"
  assert strategy.suggest_one("value", CONTEXT, "int", {"value", "param"}) == "param2"


def test_service_failure_is_not_fatal():
  strategy, _, index = _strategy([])
  index.query.side_effect = NamingServiceError("index down")
  assert strategy.suggest("value", CONTEXT, "int", {"value"}) == []

  index.query.side_effect = httpx.ConnectError("refused")
  assert strategy.suggest_one("value", CONTEXT, "int", {"value"}) == "param"


def test_with_local_index_in_memory():
  embedder = HashingEmbedder(64)
  index = LocalSimilarityIndex()

  def entry(entry_id, text, type_name, name):
    vector = embedder.embed(text).tolist()
    return {"id": entry_id, "values": vector, "metadata": {"paramType": type_name, "paramName": name}}

  index.entries.extend(
    [
      entry("a", CONTEXT.describe(), "int", "upper"),
      entry("b", "unrelated words", "int", "other"),
      entry("c", CONTEXT.describe(), "str", "text"),
    ]
  )
  strategy = SimilarityNamingStrategy(embedder, index, count=2)
  assert strategy.suggest("value", CONTEXT, "int", {"value"}, count=2) == ["upper", "other"]


def test_inconsistent_local_corpus_is_not_fatal():
  index = LocalSimilarityIndex()
  index.entries.extend(
    [
      {"id": "a", "values": [0.1] * 8, "metadata": {"paramType": "int", "paramName": "upper"}},
      {"id": "b", "values": [0.1] * 3, "metadata": {"paramType": "int", "paramName": "lower"}},
    ]
  )
  strategy = SimilarityNamingStrategy(HashingEmbedder(dimension=8), index)
  assert strategy.suggest_one("value", CONTEXT, "int", {"value"}) == "param"
