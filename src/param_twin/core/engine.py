"""
Transformation Service.

This module provides the `TransformationEngine`, the entry point for rewriting
Python source. One run consists of:

1.  **Parsing**: the source is parsed into a LibCST tree and wrapped with the
    metadata providers of the `SemanticResolver`.
2.  **Planning**: the `ParameterDuplicator` analyses every function against the
    unmodified tree (scope names, naming context, chosen name, first usage).
3.  **Applying**: the plans are written into the tree.
4.  **Rendering**: the tree is turned back into source. LibCST preserves the
    formatting of everything that was not rewritten.

The naming strategy is built once from the `RuntimeConfig` unless one is
injected, so configuration (index host, API key, corpus path) always arrives
from the outside.
"""

import logging
from typing import Optional, Union

import libcst as cst

from param_twin.config import RuntimeConfig
from param_twin.core.resolver import SemanticResolver
from param_twin.core.rewrite_result import FileProcessingOptions, RewriteResult
from param_twin.core.rewriter import ParameterDuplicator
from param_twin.core.tracer import reset_tracer
from param_twin.errors import InputNotFoundError
from param_twin.naming import NamingStrategy, build_naming_strategy

logger = logging.getLogger(__name__)


class TransformationEngine:
  """
  Rewrites single-parameter functions of a module.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None, strategy: Optional[NamingStrategy] = None):
    """
    Initializes the Engine.

    Args:
        config: The runtime configuration. Loaded from pyproject.toml and the
            environment if omitted.
        strategy: Naming strategy to use instead of the configured one.

    Raises:
        ConfigurationError: If the configured strategy cannot be built (e.g.
            similarity-based naming without index credentials).
    """
    self.config = config or RuntimeConfig.load()
    self.strategy = strategy or build_naming_strategy(self.config)

  def parse(self, code: Union[str, bytes]) -> SemanticResolver:
    """
    Parses source text and resolves its metadata.

    Args:
        code (str | bytes): Python source code; bytes honour a coding cookie.

    Returns:
        SemanticResolver: Semantic view of the parsed module.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return SemanticResolver.from_source(code)

  def to_source(self, tree: cst.Module) -> str:
    """
    Converts CST back to source string.

    Args:
        tree (cst.Module): The modified syntax tree.

    Returns:
        str: Generated Python code.
    """
    return tree.code

  def run(self, code: Union[str, bytes]) -> RewriteResult:
    """
    Executes the full transformation pipeline on a source string.

    Args:
        code (str | bytes): The input source, as text or undecoded file content.

    Returns:
        RewriteResult: Counters, transformed code and the trace.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    tracer = reset_tracer()
    tracer.start_phase("Transformation Pipeline", f"naming: {self.strategy.label}")

    tracer.start_phase("Parsing", "Source -> CST + scope metadata")
    resolver = self.parse(code)
    tracer.end_phase()

    duplicator = ParameterDuplicator(resolver, self.strategy, tracer)

    tracer.start_phase("Planning", "Per-function analysis on the unmodified tree")
    plans = duplicator.plan()
    tracer.end_phase()

    tracer.start_phase("Applying", f"{len(plans)} function(s)")
    tree = duplicator.apply()
    tracer.end_phase()

    tracer.end_phase()
    logger.debug("Rewrote %d of %d eligible functions", duplicator.changes_count, len(plans))

    return RewriteResult(
      found_any=duplicator.found_any,
      changes_count=duplicator.changes_count,
      transformed_text=self.to_source(tree),
      encoding=tree.encoding,
      trace_events=tracer.export(),
    )

  def transform_file(self, options: FileProcessingOptions) -> RewriteResult:
    """
    Reads, transforms and writes one file.

    Args:
        options: Input and output locations.

    Returns:
        RewriteResult: The outcome of the run.

    Raises:
        InputNotFoundError: If ``options.input_path`` does not exist.
        libcst.ParserSyntaxError: If the file is not valid Python.
        UnicodeDecodeError: If the file does not match its declared encoding.
    """
    if not options.input_path.is_file():
      raise InputNotFoundError(options.input_path)

    with open(options.input_path, "rb") as f:
      code = f.read()

    result = self.run(code)

    destination = options.destination
    if destination is not None:
      destination.parent.mkdir(parents=True, exist_ok=True)
      with open(destination, "wt", encoding=result.encoding, newline="") as f:
        f.write(result.transformed_text)
      logger.debug("Wrote %s", destination)
    return result
