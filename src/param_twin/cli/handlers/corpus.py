"""
Corpus Command Handlers.

Implements ``param-twin-corpus harvest`` and ``param-twin-corpus populate``.
"""

from pathlib import Path
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from param_twin.config import RuntimeConfig
from param_twin.corpus import harvest_contexts, populate_index, write_batches
from param_twin.corpus.harvest import DEFAULT_BATCH_SIZE
from param_twin.corpus.populate import DEFAULT_UPSERT_BATCH
from param_twin.errors import ConfigurationError, NamingServiceError
from param_twin.naming import build_embedder, build_index
from param_twin.utils.console import console, log_error, log_info, log_success, log_warning


def handle_harvest(
  root: Path,
  out_dir: Path = Path("contexts"),
  batch_size: int = DEFAULT_BATCH_SIZE,
  workers: Optional[int] = None,
) -> int:
  """
  Scans ``root`` and writes the harvested records as batch files.

  Args:
      root: Directory (or file) to scan.
      out_dir: Folder receiving ``contexts_N.json``.
      batch_size: Records per batch file.
      workers: Thread pool size (defaults to the CPU count).

  Returns:
      int: Exit code.
  """
  if not root.exists():
    log_error(escape(f"Path not found: {root}"))
    return 2

  records = harvest_contexts(root, workers=workers)
  if not records:
    log_warning(f"No parameters found under {escape(str(root))}")
    return 0

  files = write_batches(records, out_dir, batch_size=batch_size)
  log_success(
    f"Extracted {len(records)} parameter contexts to {len(files)} batch file(s) in [path]{escape(str(out_dir))}[/path]"
  )
  _print_type_summary(records)
  return 0


def _print_type_summary(records) -> None:
  counts = {}
  for record in records:
    counts[record.param_type] = counts.get(record.param_type, 0) + 1

  table = Table(title="Most frequent parameter types")
  table.add_column("Type", style="cyan")
  table.add_column("Parameters", justify="right")
  for type_name, total in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:10]:
    table.add_row(type_name, str(total))
  console.print(table)


def handle_populate(
  batch_files: List[Path],
  corpus_path: Optional[Path] = None,
  batch_size: int = DEFAULT_UPSERT_BATCH,
) -> int:
  """
  Embeds harvested batch files and upserts them into the configured index.

  Args:
      batch_files: ``contexts_N.json`` files (directories are expanded).
      corpus_path: Local index file; the remote index is used when omitted.
      batch_size: Entries per upsert call.

  Returns:
      int: Exit code.
  """
  files: List[Path] = []
  for path in batch_files:
    if path.is_dir():
      files.extend(sorted(path.glob("contexts_*.json")))
    elif path.is_file():
      files.append(path)
    else:
      log_error(escape(f"Batch file not found: {path}"))
      return 2

  if not files:
    log_warning("No batch files to load.")
    return 0

  try:
    config = RuntimeConfig.load(naming_strategy="similarity-based", corpus_path=corpus_path)
    embedder = build_embedder(config)
    index = build_index(config)
  except ConfigurationError as e:
    log_error(escape(str(e)))
    return 1

  log_info(f"Loading {len(files)} batch file(s)...")
  try:
    written = populate_index(files, embedder, index, batch_size=batch_size)
  except NamingServiceError as e:
    log_error(escape(str(e)))
    return 1

  log_success(f"Upserted {written} entries into namespace '{config.index_namespace}'")
  return 0
