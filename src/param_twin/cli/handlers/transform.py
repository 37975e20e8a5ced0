"""
Transform Command Handler.

Implements ``param-twin INPUT [OUTPUT]``:

1. Input validation (missing file -> exit code 2).
2. Configuration loading (pyproject.toml + CLI overrides + environment).
3. Naming strategy construction (missing credential or unreadable corpus ->
   exit code 1).
4. Transformation via the Engine, output writing and trace dumping.
"""

import json
from pathlib import Path
from typing import Optional

import libcst as cst
from rich.markup import escape

from param_twin.config import RuntimeConfig
from param_twin.core.engine import TransformationEngine
from param_twin.core.rewrite_result import FileProcessingOptions
from param_twin.errors import ConfigurationError, InputNotFoundError, NamingServiceError
from param_twin.utils.console import console, log_error, log_info

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_NOT_FOUND = 2

NOTHING_FOUND_MESSAGE = "No functions with a single parameter were found. No changes made."


def handle_transform(
  input_path: Path,
  output_path: Optional[Path] = None,
  strategy: Optional[str] = None,
  count: Optional[int] = None,
  corpus_path: Optional[Path] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the transform command.

  Args:
      input_path: Python file to rewrite.
      output_path: Destination; the input is overwritten when omitted.
      strategy: Naming strategy override (``deterministic`` | ``similarity-based``).
      count: Number of neighbours requested from the similarity index.
      corpus_path: Local similarity index file (replaces the remote index).
      json_trace_path: Optional path to dump the execution trace.

  Returns:
      int: ``0`` on success, ``1`` on configuration, corpus, decode or parse
      errors, ``2`` if
      the input file does not exist.
  """
  if not input_path.is_file():
    log_error(escape(str(InputNotFoundError(input_path))))
    return EXIT_INPUT_NOT_FOUND

  try:
    config = RuntimeConfig.load(
      naming_strategy=strategy,
      suggestion_count=count,
      corpus_path=corpus_path,
      search_path=input_path.parent,
    )
    engine = TransformationEngine(config=config)
  except (ConfigurationError, NamingServiceError) as e:
    log_error(escape(str(e)))
    return EXIT_FAILURE

  options = FileProcessingOptions(input_path=input_path, output_path=output_path, overwrite_input=output_path is None)
  try:
    result = engine.transform_file(options)
  except InputNotFoundError as e:
    log_error(escape(str(e)))
    return EXIT_INPUT_NOT_FOUND
  except cst.ParserSyntaxError as e:
    log_error(escape(f"Failed to parse {input_path}: {e}"))
    return EXIT_FAILURE
  except UnicodeError as e:
    log_error(escape(f"Failed to decode {input_path}: {e}"))
    return EXIT_FAILURE
  except OSError as e:
    log_error(escape(f"Failed to write output: {e}"))
    return EXIT_FAILURE

  if json_trace_path:
    _dump_trace(json_trace_path, result.trace_events)

  if not result.found_any:
    console.print(NOTHING_FOUND_MESSAGE)
    return EXIT_OK

  console.print(
    f"Processed file. Functions changed: {result.changes_count}. Output written to: {options.destination}",
    markup=False,
  )
  return EXIT_OK


def _dump_trace(path: Path, events) -> None:
  try:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wt", encoding="utf-8") as f:
      json.dump(events, f, indent=2)
    log_info(f"Trace saved to [path]{escape(str(path))}[/path]")
  except OSError as e:
    log_error(escape(f"Failed to write trace: {e}"))
