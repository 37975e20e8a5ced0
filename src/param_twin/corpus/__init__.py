"""
Naming corpus tooling.

Harvests parameter naming contexts from existing code and loads them into the
similarity index consumed by ``SimilarityNamingStrategy``.
"""

from param_twin.corpus.harvest import (
  ContextRecord,
  extract_contexts,
  harvest_contexts,
  iter_source_files,
  read_batches,
  write_batches,
)
from param_twin.corpus.populate import populate_index, record_id, upsert_records

__all__ = [
  "ContextRecord",
  "extract_contexts",
  "harvest_contexts",
  "iter_source_files",
  "read_batches",
  "write_batches",
  "populate_index",
  "record_id",
  "upsert_records",
]
