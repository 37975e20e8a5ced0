"""
Naming Corpus Harvester.

Scans a directory of Python sources and records, for every parameter of every
function, the naming context and the name its author chose. The records feed
the similarity index used by the similarity-based naming strategy.

Files are analysed concurrently by a thread pool. A file that cannot be read or
parsed is logged and skipped; records of the other files are kept. The order of
the returned records is not guaranteed.
"""

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from param_twin.analysis.context import build_naming_context
from param_twin.core.resolver import SemanticResolver
from param_twin.core.views import ProcedureView, collect_functions

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10000

EXCLUDED_DIRS = frozenset(
  {".git", ".hg", ".svn", "__pycache__", ".venv", "venv", "env", ".tox", ".nox", "build", "dist", "node_modules"}
)


class ContextRecord(BaseModel):
  """
  One harvested parameter.

  Serialised with the JSON keys ``context``, ``paramType`` and ``paramName``.
  """

  model_config = ConfigDict(populate_by_name=True, frozen=True)

  context: str = Field(validation_alias=AliasChoices("context", "transformerContext"))
  param_type: str = Field(alias="paramType")
  param_name: str = Field(alias="paramName")

  def to_json(self) -> dict:
    return {"context": self.context, "paramType": self.param_type, "paramName": self.param_name}


def iter_source_files(root: Path) -> Iterator[Path]:
  """
  Yields ``*.py`` files under ``root``, skipping VCS, cache, virtualenv and build folders.

  Args:
      root: Directory to scan (or a single file).
  """
  if root.is_file():
    yield root
    return
  for dirpath, dirnames, filenames in os.walk(root):
    dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS and not d.endswith(".egg-info"))
    for filename in sorted(filenames):
      if filename.endswith(".py"):
        yield Path(dirpath) / filename


def _keeps(name: str) -> bool:
  return not name.startswith("_") and len(name) >= 2


def extract_contexts(code: Union[str, bytes]) -> List[ContextRecord]:
  """
  Harvests the parameters of one module.

  Args:
      code: Python source code, as text or raw file content.

  Returns:
      List[ContextRecord]: One record per kept parameter, in document order.

  Raises:
      libcst.ParserSyntaxError: If the code is invalid Python.
  """
  resolver = SemanticResolver.from_source(code)

  records = []
  for node in collect_functions(resolver.module):
    procedure = ProcedureView.from_node(node, resolver)
    for parameter in procedure.parameters:
      if not _keeps(parameter.name):
        continue
      context = build_naming_context(procedure, parameter, resolver)
      records.append(
        ContextRecord(context=context.describe(), param_type=context.type_name, param_name=parameter.name)
      )
  return records


def _harvest_file(path: Path) -> List[ContextRecord]:
  code = path.read_bytes()
  if not code.strip():
    return []
  return extract_contexts(code)


def harvest_contexts(root: Path, workers: Optional[int] = None) -> List[ContextRecord]:
  """
  Harvests every Python file under ``root``.

  Args:
      root: Directory to scan.
      workers: Thread pool size. Defaults to the number of CPUs.

  Returns:
      List[ContextRecord]: Records of all successfully analysed files.
  """
  files = list(iter_source_files(root))
  logger.info("Scanning %d files under %s...", len(files), root)

  records: List[ContextRecord] = []
  failed = 0
  with ThreadPoolExecutor(max_workers=workers or os.cpu_count() or 1) as executor:
    futures = {executor.submit(_harvest_file, path): path for path in files}
    for future in as_completed(futures):
      path = futures[future]
      try:
        records.extend(future.result())
      except Exception as e:
        failed += 1
        logger.warning("Skipping %s: %s", path, e)

  if failed:
    logger.info("Skipped %d unreadable file(s)", failed)
  return records


def _chunks(items: Sequence[ContextRecord], size: int) -> Iterator[Sequence[ContextRecord]]:
  for start in range(0, len(items), size):
    yield items[start : start + size]


def write_batches(
  records: Sequence[ContextRecord], out_dir: Path, batch_size: int = DEFAULT_BATCH_SIZE
) -> List[Path]:
  """
  Writes records as ``contexts_0.json``, ``contexts_1.json``, ... files.

  Args:
      records: Harvested records.
      out_dir: Destination folder (created if missing).
      batch_size: Maximum number of records per file.

  Returns:
      List[Path]: The written files, in order.
  """
  if batch_size <= 0:
    raise ValueError("batch_size must be positive")
  out_dir.mkdir(parents=True, exist_ok=True)

  written = []
  for number, chunk in enumerate(_chunks(records, batch_size)):
    path = out_dir / f"contexts_{number}.json"
    with open(path, "wt", encoding="utf-8") as f:
      json.dump([record.to_json() for record in chunk], f, indent=2)
    written.append(path)
  return written


def read_batches(batch_files: Iterable[Path]) -> Iterator[ContextRecord]:
  """
  Reads records back from batch files.

  Args:
      batch_files: Files written by ``write_batches``.

  Yields:
      ContextRecord: Records in file order.
  """
  for path in batch_files:
    with open(path, "rt", encoding="utf-8") as f:
      entries = json.load(f)
    for entry in entries:
      yield ContextRecord.model_validate(entry)
