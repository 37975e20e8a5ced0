"""
param-twin Package.

A semantics-aware source-to-source transformer: every function that takes
exactly one parameter receives a second, collision-free parameter, and the
first statement using the original parameter is duplicated for the new one.

Usage
-----

Simple String Transformation
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import param_twin as pt
    code = "def abs_(value: int):\\n    return -value if value < 0 else value\\n"
    print(pt.transform(code, strategy="deterministic"))
    # def abs_(value: int, value2: int):
    #     return -value if value < 0 else value
    #     return -value2 if value2 < 0 else value2

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from param_twin import RuntimeConfig, TransformationEngine

    config = RuntimeConfig(naming_strategy="similarity-based", corpus_path="corpus.json")
    engine = TransformationEngine(config=config)
    res = engine.run(code)
    print(res.changes_count, res.transformed_text)
"""

__version__ = "0.1.0"

from typing import Optional

from param_twin.config import RuntimeConfig
from param_twin.core.engine import TransformationEngine
from param_twin.core.rewrite_result import FileProcessingOptions, RewriteResult


def transform(code: str, strategy: str = "deterministic", config: Optional[RuntimeConfig] = None) -> str:
  """
  Duplicates the parameter of every single-parameter function in ``code``.

  This is a high-level convenience wrapper around the `TransformationEngine`.

  Args:
      code (str): Python source code.
      strategy (str): Naming strategy (``deterministic`` or ``similarity-based``).
          Ignored when ``config`` is given.
      config (RuntimeConfig, optional): Full configuration (index, embeddings, ...).

  Returns:
      str: The transformed source code.

  Raises:
      libcst.ParserSyntaxError: If the code is not valid Python.
      ConfigurationError: If the selected strategy cannot be built.
  """
  engine = TransformationEngine(config=config or RuntimeConfig(naming_strategy=strategy))
  return engine.run(code).transformed_text


__all__ = [
  "transform",
  "RuntimeConfig",
  "TransformationEngine",
  "FileProcessingOptions",
  "RewriteResult",
  "__version__",
]
