"""
Transformation trace.

A run is recorded as a flat list of events. Phases (parsing, planning,
applying) nest: every event carries the id of the phase that was open when it
was recorded, so the list can be folded back into a tree by consumers of the
``--json-trace`` dump.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from param_twin.enums import ProcedureState


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  PROCEDURE_STATE = "procedure_state"
  NAME_CHOSEN = "name_chosen"
  AST_MUTATION = "ast_mutation"
  ANALYSIS_WARNING = "analysis_warning"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


def _new_id() -> str:
  return uuid.uuid4().hex


class TraceLogger:
  """
  Collects events for one transformation run.

  The engine owns the phases; the duplicator reports per-function state
  changes, chosen names and signature mutations into whatever phase is open.
  """

  def __init__(self):
    self._events: List[TraceEvent] = []
    self._open: List[str] = []

  @property
  def _current_phase(self) -> Optional[str]:
    return self._open[-1] if self._open else None

  def _record(
    self,
    kind: TraceEventType,
    description: str,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    event_id: Optional[str] = None,
    parent_id: Optional[str] = None,
  ) -> str:
    event = TraceEvent(
      id=event_id or _new_id(),
      type=kind,
      timestamp=time.time(),
      description=description,
      parent_id=parent_id if parent_id is not None else self._current_phase,
      metadata=metadata or {},
    )
    self._events.append(event)
    return event.id

  def start_phase(self, name: str, description: str = "") -> str:
    """
    Opens a phase nested in the current one.

    Args:
        name: Short phase label, e.g. ``"Planning"``.
        description: Free-form detail stored under ``metadata["detail"]``.

    Returns:
        str: The phase id, which later events reference as ``parent_id``.
    """
    phase_id = self._record(TraceEventType.PHASE_START, name, {"detail": description})
    self._open.append(phase_id)
    return phase_id

  def end_phase(self):
    """Closes the innermost open phase. Does nothing when none is open."""
    if not self._open:
      return
    closing = self._open.pop()
    self._record(TraceEventType.PHASE_END, "End Phase", parent_id=closing)

  def log_state(self, procedure: str, state: ProcedureState, detail: str = ""):
    self._record(
      TraceEventType.PROCEDURE_STATE,
      f"{procedure}: {state.value}",
      {"procedure": procedure, "state": state.value, "detail": detail},
    )

  def log_name(self, procedure: str, original: str, chosen: str, strategy: str):
    self._record(
      TraceEventType.NAME_CHOSEN,
      f"{procedure}: {original} -> {chosen}",
      {"procedure": procedure, "original": original, "chosen": chosen, "strategy": strategy},
    )

  def log_mutation(self, node_type: str, before: str, after: str):
    """Records a rewritten node as its header before and after the change."""
    self._record(TraceEventType.AST_MUTATION, f"Transformed {node_type}", {"before": before, "after": after})

  def log_warning(self, message: str):
    self._record(TraceEventType.ANALYSIS_WARNING, message, {"level": "warning"})

  def export(self) -> List[Dict[str, Any]]:
    """Returns the events as plain dicts, ready for ``json.dumps``."""
    return [asdict(event) for event in self._events]


_tracer = TraceLogger()


def get_tracer() -> TraceLogger:
  return _tracer


def reset_tracer() -> TraceLogger:
  """Replaces the process-wide tracer with an empty one."""
  global _tracer
  _tracer = TraceLogger()
  return _tracer
