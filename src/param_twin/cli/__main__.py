"""
Main Entry Points for the param-twin CLI.

This module handles argument parsing and dispatches to the command handlers
defined in `param_twin.cli.commands`.

*   ``param-twin INPUT [OUTPUT]``: duplicate single parameters of a file.
*   ``param-twin-corpus harvest|populate``: build the naming corpus.

argparse reports usage errors with exit status 2, which this tool reserves for
"input file not found"; usage errors are therefore mapped to 1.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from param_twin import __version__
from param_twin.cli import commands
from param_twin.corpus.harvest import DEFAULT_BATCH_SIZE
from param_twin.corpus.populate import DEFAULT_UPSERT_BATCH
from param_twin.enums import NamingStrategyKind


def _parse(parser: argparse.ArgumentParser, argv: Optional[List[str]]):
  try:
    return parser.parse_args(argv), None
  except SystemExit as e:
    return None, 0 if e.code in (0, None) else 1


def main(argv: Optional[List[str]] = None) -> int:
  """
  Transform entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 success, 1 invalid arguments / configuration / parse
      error, 2 input file not found).
  """
  parser = argparse.ArgumentParser(
    prog="param-twin",
    description="param-twin: duplicate the parameter of every single-parameter function",
  )
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("input", type=Path, help="Python file to transform")
  parser.add_argument("output", type=Path, nargs="?", default=None, help="Output file (default: overwrite input)")
  parser.add_argument(
    "--strategy",
    choices=[kind.value for kind in NamingStrategyKind],
    default=None,
    help="Naming strategy for the new parameter (default: from toml, else similarity-based)",
  )
  parser.add_argument("--count", type=int, default=None, help="Neighbours requested from the similarity index")
  parser.add_argument(
    "--corpus", type=Path, default=None, help="Local similarity index file (used instead of the remote index)"
  )
  parser.add_argument(
    "--json-trace", type=Path, default=None, help="Dump the execution trace (events, decisions) to a JSON file."
  )

  args, exit_code = _parse(parser, argv)
  if args is None:
    return exit_code
  if args.count is not None and args.count < 1:
    parser.print_usage(sys.stderr)
    print("param-twin: error: --count must be at least 1", file=sys.stderr)
    return 1

  return commands.handle_transform(args.input, args.output, args.strategy, args.count, args.corpus, args.json_trace)


def corpus_main(argv: Optional[List[str]] = None) -> int:
  """
  Corpus tooling entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(prog="param-twin-corpus", description="Build the parameter naming corpus")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: HARVEST ---
  cmd_harv = subparsers.add_parser("harvest", help="Extract parameter naming contexts from Python sources")
  cmd_harv.add_argument("root", type=Path, help="Directory to scan")
  cmd_harv.add_argument("--out-dir", type=Path, default=Path("contexts"), help="Batch file folder (default: contexts)")
  cmd_harv.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Records per batch file")
  cmd_harv.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")

  # --- Command: POPULATE ---
  cmd_pop = subparsers.add_parser("populate", help="Embed batch files and upsert them into the similarity index")
  cmd_pop.add_argument("batches", type=Path, nargs="+", help="Batch files or folders holding them")
  cmd_pop.add_argument("--corpus", type=Path, default=None, help="Local index file (default: remote index)")
  cmd_pop.add_argument("--batch-size", type=int, default=DEFAULT_UPSERT_BATCH, help="Entries per upsert request")

  args, exit_code = _parse(parser, argv)
  if args is None:
    return exit_code
  if args.batch_size < 1:
    print("param-twin-corpus: error: --batch-size must be at least 1", file=sys.stderr)
    return 1

  if args.command == "harvest":
    return commands.handle_harvest(args.root, args.out_dir, args.batch_size, args.workers)

  elif args.command == "populate":
    return commands.handle_populate(args.batches, args.corpus, args.batch_size)

  return 0


if __name__ == "__main__":
  sys.exit(main())
