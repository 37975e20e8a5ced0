"""
Tests for naming corpus population.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from param_twin.corpus.harvest import ContextRecord, write_batches
from param_twin.corpus.populate import populate_index, record_id, upsert_records
from param_twin.naming import HashingEmbedder, LocalSimilarityIndex


def _records(n):
  return [ContextRecord(context=f"Type: int in method f{i}", param_type="int", param_name=f"n{i}") for i in range(n)]


def test_record_id_is_stable_and_distinct():
  a, b = _records(2)
  assert record_id(a) == record_id(ContextRecord(context=a.context, param_type="int", param_name="n0"))
  assert record_id(a) != record_id(b)


def test_upsert_records_batches_calls():
  embedder = MagicMock()
  embedder.embed.return_value = np.zeros(4, dtype=np.float32)
  index = MagicMock()
  index.upsert.side_effect = lambda batch: len(batch)

  written = upsert_records(_records(5), embedder, index, batch_size=2)

  assert written == 5
  assert [len(call.args[0]) for call in index.upsert.call_args_list] == [2, 2, 1]
  first = index.upsert.call_args_list[0].args[0][0]
  assert first.metadata == {"paramType": "int", "paramName": "n0"}


def test_upsert_records_rejects_bad_batch_size():
  with pytest.raises(ValueError):
    upsert_records([], MagicMock(), MagicMock(), batch_size=0)


def test_populate_index_is_idempotent(tmp_path):
  files = write_batches(_records(3), tmp_path / "batches", batch_size=2)
  index = LocalSimilarityIndex(tmp_path / "corpus.json")
  embedder = HashingEmbedder(16)

  assert populate_index(files, embedder, index) == 3
  assert populate_index(files, embedder, index) == 3
  assert len(LocalSimilarityIndex.load(tmp_path / "corpus.json")) == 3
