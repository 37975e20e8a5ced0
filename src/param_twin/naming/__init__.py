"""
Naming strategies for duplicated parameters.

The strategy is selected once at startup from ``RuntimeConfig.naming_strategy``
via ``build_naming_strategy``.
"""

from param_twin.config import RuntimeConfig
from param_twin.enums import NamingStrategyKind
from param_twin.naming.base import FALLBACK_NAME, NamingStrategy, first_usable, is_valid_identifier
from param_twin.naming.deterministic import DeterministicNamingStrategy
from param_twin.naming.embedding import Embedder, HashingEmbedder, HttpEmbedder
from param_twin.naming.index import IndexMatch, IndexRecord, LocalSimilarityIndex, RemoteSimilarityIndex, SimilarityIndex
from param_twin.naming.similarity import SimilarityNamingStrategy


def build_embedder(config: RuntimeConfig) -> Embedder:
  """
  Creates the embedding function described by the configuration.

  Args:
      config: Runtime configuration.

  Returns:
      Embedder: ``HttpEmbedder`` if ``embedding_url`` is set, else ``HashingEmbedder``.
  """
  if config.embedding_url:
    return HttpEmbedder(
      base_url=config.embedding_url,
      model=config.embedding_model,
      dimension=config.embedding_dim,
      api_key=config.embedding_api_key,
      timeout_s=config.request_timeout,
    )
  return HashingEmbedder(config.embedding_dim)


def build_index(config: RuntimeConfig) -> SimilarityIndex:
  """
  Creates the similarity index described by the configuration.

  Args:
      config: Runtime configuration.

  Returns:
      SimilarityIndex: The local index when ``corpus_path`` is set, else the remote one.

  Raises:
      ConfigurationError: If the remote index lacks a host or an API key.
  """
  if config.corpus_path is not None:
    return LocalSimilarityIndex.load(config.corpus_path, namespace=config.index_namespace)
  config.validate_credentials()
  return RemoteSimilarityIndex(
    host=config.index_host,
    api_key=config.index_api_key,
    namespace=config.index_namespace,
    timeout_s=config.request_timeout,
  )


def build_naming_strategy(config: RuntimeConfig) -> NamingStrategy:
  """
  Instantiates the naming strategy selected by the configuration.

  Args:
      config: Runtime configuration.

  Returns:
      NamingStrategy: The configured strategy.

  Raises:
      ConfigurationError: If similarity-based naming is selected without a
          usable index configuration.
  """
  if config.naming_strategy == NamingStrategyKind.DETERMINISTIC:
    return DeterministicNamingStrategy()
  return SimilarityNamingStrategy(build_embedder(config), build_index(config), count=config.suggestion_count)


__all__ = [
  "FALLBACK_NAME",
  "NamingStrategy",
  "first_usable",
  "is_valid_identifier",
  "DeterministicNamingStrategy",
  "SimilarityNamingStrategy",
  "Embedder",
  "HashingEmbedder",
  "HttpEmbedder",
  "IndexMatch",
  "IndexRecord",
  "SimilarityIndex",
  "LocalSimilarityIndex",
  "RemoteSimilarityIndex",
  "build_embedder",
  "build_index",
  "build_naming_strategy",
]
