"""
Tests for the naming corpus harvester.
"""

import json

import libcst as cst
import pytest

from param_twin.corpus.harvest import (
  ContextRecord,
  extract_contexts,
  harvest_contexts,
  iter_source_files,
  read_batches,
  write_batches,
)

SAMPLE = '''
import numpy as np


def mean(values: np.ndarray, axis: int = 0):
    """Computes the mean.

    Longer description.
    """
    return values.mean(axis)


class Reader:
    def read(self, path: str, _cache, n):
        return path
'''


def test_extract_contexts_records_each_kept_parameter():
  records = extract_contexts(SAMPLE)
  assert [(r.param_name, r.param_type) for r in records] == [
    ("values", "numpy.ndarray"),
    ("axis", "int"),
    ("path", "str"),
  ]
  assert records[0].context == "Method description: Computes the mean.\nType: numpy.ndarray in method mean"
  assert records[2].context == "Method description: \nType: str in method read"


def test_extract_contexts_rejects_invalid_source():
  with pytest.raises(cst.ParserSyntaxError):
    extract_contexts("def broken(:\n")


def test_record_json_keys_and_legacy_alias():
  record = ContextRecord(context="c", param_type="int", param_name="count")
  assert record.to_json() == {"context": "c", "paramType": "int", "paramName": "count"}

  legacy = ContextRecord.model_validate({"transformerContext": "c", "paramType": "int", "paramName": "count"})
  assert legacy == record


def test_iter_source_files_skips_excluded_dirs(tmp_path):
  (tmp_path / "pkg").mkdir()
  (tmp_path / "pkg" / "a.py").write_text("x = 1\n")
  (tmp_path / "pkg" / "notes.txt").write_text("hi\n")
  (tmp_path / ".venv").mkdir()
  (tmp_path / ".venv" / "lib.py").write_text("x = 1\n")
  (tmp_path / "thing.egg-info").mkdir()
  (tmp_path / "thing.egg-info" / "b.py").write_text("x = 1\n")

  assert list(iter_source_files(tmp_path)) == [tmp_path / "pkg" / "a.py"]
  assert list(iter_source_files(tmp_path / "pkg" / "a.py")) == [tmp_path / "pkg" / "a.py"]


def test_harvest_skips_broken_files(tmp_path):
  (tmp_path / "good.py").write_text(SAMPLE, encoding="utf-8")
  (tmp_path / "bad.py").write_text("def broken(:\n", encoding="utf-8")
  (tmp_path / "empty.py").write_text("", encoding="utf-8")

  records = harvest_contexts(tmp_path, workers=2)
  assert sorted(r.param_name for r in records) == ["axis", "path", "values"]


def test_write_and_read_batches(tmp_path):
  records = [ContextRecord(context=f"c{i}", param_type="int", param_name=f"name{i}") for i in range(5)]
  files = write_batches(records, tmp_path / "out", batch_size=2)

  assert [f.name for f in files] == ["contexts_0.json", "contexts_1.json", "contexts_2.json"]
  assert json.loads(files[0].read_text())[0] == {"context": "c0", "paramType": "int", "paramName": "name0"}
  assert list(read_batches(files)) == records


def test_write_batches_rejects_bad_size(tmp_path):
  with pytest.raises(ValueError):
    write_batches([], tmp_path, batch_size=0)
