"""
Simulator error taxonomy

Every error is recoverable at the call site; none of them is fatal to the
process.
"""

from typing import Any, Dict, Optional


class SimulatorError(Exception):
    """Base class for simulator errors"""

    code = "SIMULATOR_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(SimulatorError):
    """Rejected input: the operation had no effect"""

    code = "VALIDATION_ERROR"


class NotFoundError(SimulatorError):
    """Unknown pin, group, scenario or preset id"""

    code = "NOT_FOUND"

    def __init__(self, kind: str, ident: Any):
        super().__init__(f"{kind} '{ident}' not found", details={"kind": kind, "id": ident})
        self.kind = kind
        self.ident = ident


class TransportError(SimulatorError):
    """Malformed inbound payload (reconciliation or import)"""

    code = "TRANSPORT_ERROR"
