"""
Naming Corpus Population.

Embeds harvested records and upserts them into a similarity index. Each entry
is stored as ``{id, values, metadata: {paramType, paramName}}``; the id is a
stable hash of the record, so re-running population replaces entries instead
of duplicating them.
"""

import hashlib
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from param_twin.corpus.harvest import ContextRecord, read_batches
from param_twin.naming.embedding import Embedder
from param_twin.naming.index import IndexRecord, SimilarityIndex

logger = logging.getLogger(__name__)

DEFAULT_UPSERT_BATCH = 100


def record_id(record: ContextRecord) -> str:
  """
  Stable identifier of a record.

  Args:
      record: Harvested record.

  Returns:
      str: Hex digest over context, type and name.
  """
  digest = hashlib.sha1()
  for part in (record.context, record.param_type, record.param_name):
    digest.update(part.encode("utf-8"))
    digest.update(b"\0")
  return digest.hexdigest()


def to_index_record(record: ContextRecord, embedder: Embedder) -> IndexRecord:
  vector = embedder.embed(record.context)
  return IndexRecord(
    id=record_id(record),
    values=[float(v) for v in vector],
    metadata={"paramType": record.param_type, "paramName": record.param_name},
  )


def upsert_records(
  records: Iterable[ContextRecord],
  embedder: Embedder,
  index: SimilarityIndex,
  batch_size: int = DEFAULT_UPSERT_BATCH,
) -> int:
  """
  Embeds and upserts records in batches.

  Args:
      records: Records to store.
      embedder: Embedding function applied to ``record.context``.
      index: Destination index.
      batch_size: Number of entries per upsert call.

  Returns:
      int: Number of entries the index reported as written.
  """
  if batch_size <= 0:
    raise ValueError("batch_size must be positive")

  written = 0
  pending: List[IndexRecord] = []
  for record in records:
    pending.append(to_index_record(record, embedder))
    if len(pending) >= batch_size:
      written += index.upsert(pending)
      logger.debug("Upserted %d entries", written)
      pending = []
  if pending:
    written += index.upsert(pending)
  return written


def populate_index(
  batch_files: Sequence[Path],
  embedder: Embedder,
  index: SimilarityIndex,
  batch_size: int = DEFAULT_UPSERT_BATCH,
) -> int:
  """
  Loads batch files written by the harvester into a similarity index.

  Args:
      batch_files: ``contexts_N.json`` files.
      embedder: Embedding function.
      index: Destination index.
      batch_size: Number of entries per upsert call.

  Returns:
      int: Number of entries written.

  Raises:
      NamingServiceError: If embedding or upserting fails.
  """
  logger.info("Populating index from %d batch file(s)", len(batch_files))
  return upsert_records(read_batches(batch_files), embedder, index, batch_size)
