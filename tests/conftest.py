"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A recording console so CLI output can be asserted on.
- A deterministic engine factory and an offline naming corpus.
"""

import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'param_twin' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from param_twin.config import RuntimeConfig
from param_twin.core.engine import TransformationEngine
from param_twin.core.tracer import reset_tracer
from param_twin.naming import HashingEmbedder, IndexRecord, LocalSimilarityIndex
from param_twin.utils.console import reset_console, set_console


@pytest.fixture(autouse=True)
def isolate_tracer():
  """Each test starts with an empty global trace."""
  reset_tracer()
  yield
  reset_tracer()


@pytest.fixture
def recorded_console():
  """
  Routes console output and logging into a recording console.

  Use ``recorded_console.export_text()`` to read everything printed.
  """
  console = Console(record=True, width=200, force_terminal=False, color_system=None)
  set_console(console)
  yield console
  reset_console()


@pytest.fixture
def deterministic_engine():
  """An engine using suffix naming; needs no network and no credentials."""
  return TransformationEngine(config=RuntimeConfig(naming_strategy="deterministic"))


@pytest.fixture
def rewrite(deterministic_engine):
  """Returns a function transforming source text with the deterministic engine."""

  def _rewrite(code: str) -> str:
    return deterministic_engine.run(code).transformed_text

  return _rewrite


@pytest.fixture
def corpus_file(tmp_path):
  """
  A small local similarity index on disk.

  Entries are embedded with the default ``HashingEmbedder`` so that queries
  built from the same context text score 1.0.
  """
  embedder = HashingEmbedder()
  index = LocalSimilarityIndex(tmp_path / "corpus.json")
  entries = [
    ("Method description: Clamps a value\nType: int in method clamp", "int", "upper"),
    ("Method description: Computes the mean\nType: numpy.ndarray in method mean", "numpy.ndarray", "weights"),
    ("Method description: Opens a file\nType: str in method open_file", "str", "mode"),
  ]
  records = [
    IndexRecord(
      id=f"entry-{i}",
      values=[float(v) for v in embedder.embed(text)],
      metadata={"paramType": type_name, "paramName": name},
    )
    for i, (text, type_name, name) in enumerate(entries)
  ]
  index.upsert(records)
  return tmp_path / "corpus.json"
