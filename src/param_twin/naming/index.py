"""
Similarity indexes holding the naming corpus.

Each entry stores the embedding of a harvested naming context together with
metadata ``{"paramType": ..., "paramName": ...}``. Queries return the names of
the nearest entries whose ``paramType`` matches.

*   ``LocalSimilarityIndex``: JSON file on disk, cosine similarity in numpy.
*   ``RemoteSimilarityIndex``: Pinecone-compatible data-plane REST API
    (``POST /query``, ``POST /vectors/upsert``) reached through ``httpx``.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import httpx
import numpy as np

from param_twin.errors import NamingServiceError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "code-contexts"


@dataclass(frozen=True)
class IndexMatch:
  """One ranked query result."""

  param_name: str
  score: float


@dataclass(frozen=True)
class IndexRecord:
  """One entry to upsert."""

  id: str
  values: Sequence[float]
  metadata: Mapping[str, str]

  def to_json(self) -> Dict[str, Any]:
    return {"id": self.id, "values": [float(v) for v in self.values], "metadata": dict(self.metadata)}


class SimilarityIndex(Protocol):
  """Nearest-neighbour store of naming contexts."""

  def query(self, vector: np.ndarray, top_k: int, filter: Optional[Mapping[str, str]] = None) -> List[IndexMatch]:
    ...

  def upsert(self, records: Sequence[IndexRecord]) -> int:
    ...


def _matches_filter(metadata: Mapping[str, Any], filter: Optional[Mapping[str, str]]) -> bool:
  if not filter:
    return True
  return all(metadata.get(key) == value for key, value in filter.items())


class LocalSimilarityIndex:
  """
  File-backed index.

  Layout of the JSON file::

      {"namespaces": {"code-contexts": [{"id": ..., "values": [...], "metadata": {...}}]}}
  """

  def __init__(self, path: Optional[Path] = None, namespace: str = DEFAULT_NAMESPACE) -> None:
    """
    Args:
        path: Backing file. ``None`` keeps the index in memory only.
        namespace: Partition of the file this index reads and writes.
    """
    self.path = path
    self.namespace = namespace
    self._namespaces: Dict[str, List[Dict[str, Any]]] = {}
    if path is not None and path.exists():
      self._load(path)

  @classmethod
  def load(cls, path: Path, namespace: str = DEFAULT_NAMESPACE) -> "LocalSimilarityIndex":
    return cls(path=path, namespace=namespace)

  def _load(self, path: Path) -> None:
    try:
      with open(path, "rt", encoding="utf-8") as f:
        data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
      raise NamingServiceError(f"Cannot read similarity index {path}: {e}") from e
    namespaces = data.get("namespaces", {}) if isinstance(data, dict) else None
    if not isinstance(namespaces, dict) or not all(isinstance(v, list) for v in namespaces.values()):
      raise NamingServiceError(f"Similarity index {path} has no valid 'namespaces' mapping")
    self._namespaces = {ns: list(entries) for ns, entries in namespaces.items()}

  @property
  def entries(self) -> List[Dict[str, Any]]:
    return self._namespaces.setdefault(self.namespace, [])

  def __len__(self) -> int:
    return len(self.entries)

  def query(self, vector: np.ndarray, top_k: int, filter: Optional[Mapping[str, str]] = None) -> List[IndexMatch]:
    """
    Ranks stored entries by cosine similarity to ``vector``.

    Args:
        vector: Query embedding.
        top_k: Maximum number of matches.
        filter: Exact-match metadata constraints (e.g. ``{"paramType": "int"}``).

    Returns:
        List[IndexMatch]: Best first.
    """
    candidates = [e for e in self._checked_entries() if _matches_filter(e["metadata"], filter)]
    if not candidates or top_k <= 0:
      return []

    query = np.asarray(vector, dtype=np.float32)
    matrix = self._matrix(candidates, query.shape[0])

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    norms[norms == 0] = 1.0
    scores = matrix @ query / norms
    order = np.argsort(-scores, kind="stable")[:top_k]
    return [
      IndexMatch(param_name=str(candidates[i]["metadata"].get("paramName", "")), score=float(scores[i])) for i in order
    ]

  def _checked_entries(self) -> List[Dict[str, Any]]:
    for entry in self.entries:
      if not isinstance(entry, dict) or not isinstance(entry.get("metadata"), dict):
        raise NamingServiceError(f"Malformed entry in namespace '{self.namespace}': {entry!r:.80}")
    return self.entries

  @staticmethod
  def _matrix(entries: Sequence[Dict[str, Any]], dimension: int) -> np.ndarray:
    rows = []
    for entry in entries:
      values = entry.get("values")
      if not isinstance(values, list) or len(values) != dimension:
        size = len(values) if isinstance(values, list) else None
        raise NamingServiceError(
          f"Index entry {entry.get('id')!r} has dimension {size}, query dimension is {dimension}"
        )
      rows.append(values)
    try:
      return np.asarray(rows, dtype=np.float32)
    except (TypeError, ValueError) as e:
      raise NamingServiceError(f"Index holds a non-numeric vector: {e}") from e

  def upsert(self, records: Sequence[IndexRecord]) -> int:
    """
    Inserts or replaces entries by id and persists the file.

    Returns:
        int: Number of records written.
    """
    by_id = {e["id"]: pos for pos, e in enumerate(self.entries)}
    for record in records:
      payload = record.to_json()
      if record.id in by_id:
        self.entries[by_id[record.id]] = payload
      else:
        by_id[record.id] = len(self.entries)
        self.entries.append(payload)
    self.save()
    return len(records)

  def save(self) -> None:
    if self.path is None:
      return
    self.path.parent.mkdir(parents=True, exist_ok=True)
    with open(self.path, "wt", encoding="utf-8") as f:
      json.dump({"namespaces": self._namespaces}, f)


class RemoteSimilarityIndex:
  """
  Client for a Pinecone-compatible vector index.
  """

  def __init__(
    self,
    host: str,
    api_key: str,
    namespace: str = DEFAULT_NAMESPACE,
    timeout_s: float = 30.0,
    client: Optional[httpx.Client] = None,
  ) -> None:
    """
    Args:
        host: Index host URL (``https://<index>-<project>.svc.<region>.pinecone.io``).
        api_key: Value of the ``Api-Key`` header.
        namespace: Namespace queried and written.
        timeout_s: Per-request timeout applied by the HTTP client.
        client: Pre-configured client (tests inject a mock transport here).
    """
    if not host.startswith(("http://", "https://")):
      host = f"https://{host}"
    self.namespace = namespace
    self._client = client or httpx.Client(
      base_url=host.rstrip("/"),
      headers={"Api-Key": api_key, "Content-Type": "application/json"},
      timeout=timeout_s,
    )

  def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
      resp = self._client.post(path, json=payload)
      resp.raise_for_status()
      return resp.json()
    except httpx.HTTPError as e:
      raise NamingServiceError(f"Similarity index request {path} failed: {e}") from e
    except ValueError as e:
      raise NamingServiceError(f"Similarity index returned invalid JSON: {e}") from e

  def query(self, vector: np.ndarray, top_k: int, filter: Optional[Mapping[str, str]] = None) -> List[IndexMatch]:
    payload: Dict[str, Any] = {
      "namespace": self.namespace,
      "vector": [float(v) for v in vector],
      "topK": top_k,
      "includeMetadata": True,
    }
    if filter:
      payload["filter"] = {key: {"$eq": value} for key, value in filter.items()}

    data = self._post("/query", payload)
    matches = []
    for match in data.get("matches", []):
      metadata = match.get("metadata") or {}
      name = metadata.get("paramName")
      if name is None:
        continue
      matches.append(IndexMatch(param_name=str(name), score=float(match.get("score", 0.0))))
    logger.debug("Index returned %d matches for filter %s", len(matches), filter)
    return matches

  def upsert(self, records: Sequence[IndexRecord]) -> int:
    if not records:
      return 0
    data = self._post(
      "/vectors/upsert",
      {"namespace": self.namespace, "vectors": [record.to_json() for record in records]},
    )
    return int(data.get("upsertedCount", len(records)))

  def close(self) -> None:
    self._client.close()
