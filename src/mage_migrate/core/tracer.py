"""
Migration Trace Logger.

Records the step-by-step execution of one file's migration:
1. Lifecycle Phases (Gate, Scanning, Injecting, Refresh).
2. Matches (``Mage::getModel`` rewritten against ``\\Magento\\...Factory``).
3. Unresolved calls and DI conflicts.
4. Constructor injections.

The output is a structured list of Event Log dictionaries suitable for JSON
serialization. One logger is created per file so parallel runs never share it.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  MATCH = "match"
  UNRESOLVED = "unresolved"
  INJECTION = "injection"
  WARNING = "warning"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Records migration events for reporting.
  Injected into the processor by the engine.
  """

  def __init__(self):
    self._events: List[TraceEvent] = []
    self._active_phases: List[str] = []  # Stack of phase IDs

  def start_phase(self, name: str, description: str = "") -> str:
    """Starts a nested phase (e.g., 'Scanning'). Returns Phase ID."""
    phase_id = str(uuid.uuid4())
    parent = self._active_phases[-1] if self._active_phases else None

    event = TraceEvent(
      id=phase_id,
      type=TraceEventType.PHASE_START,
      timestamp=time.time(),
      description=name,
      parent_id=parent,
      metadata={"detail": description},
    )
    self._events.append(event)
    self._active_phases.append(phase_id)
    return phase_id

  def end_phase(self):
    """Ends the current active phase."""
    if not self._active_phases:
      return

    phase_id = self._active_phases.pop()
    event = TraceEvent(
      id=str(uuid.uuid4()),
      type=TraceEventType.PHASE_END,
      timestamp=time.time(),
      description="End Phase",
      parent_id=phase_id,
    )
    self._events.append(event)

  def log_match(self, legacy_symbol: str, resolved_type: Optional[str], span: List[int]):
    """Logs a rewritten legacy call."""
    self._log_simple(
      TraceEventType.MATCH,
      f"Rewrote {legacy_symbol}",
      {"source": legacy_symbol, "target": resolved_type, "span": span},
    )

  def log_unresolved(self, legacy_symbol: str, reason: str, span: List[int]):
    self._log_simple(TraceEventType.UNRESOLVED, f"Left {legacy_symbol} unchanged", {"reason": reason, "span": span})

  def log_injection(self, variable_name: str, type_name: str):
    """Logs a constructor dependency."""
    self._log_simple(
      TraceEventType.INJECTION,
      f"Injected ${variable_name}",
      {"variable_name": variable_name, "type": type_name},
    )

  def log_warning(self, message: str):
    self._log_simple(TraceEventType.WARNING, message, {"level": "warning"})

  def _log_simple(self, evt_type: TraceEventType, desc: str, meta: Dict[str, Any]):
    parent = self._active_phases[-1] if self._active_phases else None
    self._events.append(
      TraceEvent(
        id=str(uuid.uuid4()), type=evt_type, timestamp=time.time(), description=desc, parent_id=parent, metadata=meta
      )
    )

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]
