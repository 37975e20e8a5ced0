"""
Data structures exchanged with the transformation service.

``FileProcessingOptions`` describes where to read and write, ``RewriteResult``
what happened.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FileProcessingOptions(BaseModel):
  """
  Input and output locations of one file transformation.
  """

  input_path: Path = Field(description="The file to transform.")
  output_path: Optional[Path] = Field(
    default=None, description="Where to write the result. Defaults to the input file."
  )
  overwrite_input: bool = Field(
    default=True, description="Whether the input file may be overwritten when no output path is given."
  )

  @property
  def destination(self) -> Optional[Path]:
    """
    The file the result is written to.

    Returns:
        ``output_path`` if given, otherwise ``input_path`` when overwriting is
        allowed, otherwise None (nothing is written).
    """
    if self.output_path is not None:
      return self.output_path
    return self.input_path if self.overwrite_input else None


class RewriteResult(BaseModel):
  """
  Outcome of one transformation run.
  """

  found_any: bool = Field(default=False, description="True if at least one single-parameter function exists.")
  changes_count: int = Field(default=0, description="Number of functions that received a duplicated parameter.")
  transformed_text: str = Field(default="", description="The rewritten source code.")
  encoding: str = Field(default="utf-8", description="Source encoding of the input, used when writing the output.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def changed(self) -> bool:
    return self.changes_count > 0
