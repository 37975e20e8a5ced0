"""
Embedding functions for the similarity-based naming strategy.

An embedder turns the natural-language naming context of a parameter into a
fixed-size vector. Two implementations are provided:

*   ``HashingEmbedder``: offline, deterministic feature hashing over the words of
    the context (identifiers are split on ``camelCase`` and ``snake_case``).
*   ``HttpEmbedder``: any OpenAI-compatible ``/embeddings`` endpoint (vLLM,
    text-embeddings-inference, ...), called through ``httpx``.

Both raise ``NamingServiceError`` on failure; callers decide whether that is
fatal.
"""

import hashlib
import logging
import re
from typing import List, Optional, Protocol

import httpx
import numpy as np

from param_twin.errors import NamingServiceError

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 384

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


class Embedder(Protocol):
  """Maps text to a vector of ``dimension`` floats."""

  dimension: int

  def embed(self, text: str) -> np.ndarray:
    ...


def tokenize(text: str) -> List[str]:
  """
  Splits free text and identifiers into lower-case words.

  Example:
      ``"Type: numpy.ndarray in method computeMeanValue"`` ->
      ``["type", "numpy", "ndarray", "in", "method", "compute", "mean", "value"]``
  """
  return [word.lower() for word in _WORD_RE.findall(text)]


class HashingEmbedder:
  """
  Signed feature hashing of unigrams and bigrams, L2 normalised.
  """

  def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
    if dimension <= 0:
      raise ValueError("Embedding dimension must be positive.")
    self.dimension = dimension

  def _bucket(self, feature: str):
    digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
    index = int.from_bytes(digest[:4], "little") % self.dimension
    sign = 1.0 if digest[4] & 1 else -1.0
    return index, sign

  def embed(self, text: str) -> np.ndarray:
    words = tokenize(text)
    features = words + [f"{a}_{b}" for a, b in zip(words, words[1:])]
    vector = np.zeros(self.dimension, dtype=np.float32)
    for feature in features:
      index, sign = self._bucket(feature)
      vector[index] += sign
    norm = np.linalg.norm(vector)
    if norm > 0:
      vector /= norm
    return vector


class HttpEmbedder:
  """
  Client for an OpenAI-compatible embeddings endpoint.
  """

  def __init__(
    self,
    base_url: str,
    model: str,
    dimension: int = DEFAULT_DIMENSION,
    api_key: Optional[str] = None,
    timeout_s: float = 30.0,
    client: Optional[httpx.Client] = None,
  ) -> None:
    """
    Args:
        base_url: Server root, e.g. ``http://localhost:8088/v1``.
        model: Embedding model name sent with each request.
        dimension: Expected vector size; responses of another size are rejected.
        api_key: Optional bearer token.
        timeout_s: Per-request timeout applied by the HTTP client.
        client: Pre-configured client (tests inject a mock transport here).
    """
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
    self.model = model
    self.dimension = dimension
    self._client = client or httpx.Client(base_url=base_url.rstrip("/"), headers=headers, timeout=timeout_s)

  def embed(self, text: str) -> np.ndarray:
    try:
      resp = self._client.post("/embeddings", json={"model": self.model, "input": text})
      resp.raise_for_status()
      data = resp.json()
      values = data["data"][0]["embedding"]
    except httpx.HTTPError as e:
      raise NamingServiceError(f"Embedding request failed: {e}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
      raise NamingServiceError(f"Malformed embedding response: {e}") from e

    vector = np.asarray(values, dtype=np.float32)
    if vector.shape != (self.dimension,):
      raise NamingServiceError(f"Expected an embedding of size {self.dimension}, got {vector.shape}")
    logger.debug("Embedded %d chars with %s", len(text), self.model)
    return vector

  def close(self) -> None:
    self._client.close()
