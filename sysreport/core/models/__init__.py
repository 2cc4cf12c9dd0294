"""
Domain models — Pydantic types for the report engine.

All models are re-exported here for convenient access:

    from sysreport.core.models import Probe, Section, ExecutionResult, PrivilegeContext
"""

from sysreport.core.models.privilege import PrivilegeContext, detect_privilege
from sysreport.core.models.probe import Catalog, Probe, Section, Subsection
from sysreport.core.models.result import (
    CommandOutcome,
    ExecutionResult,
    ExitStatus,
    FailureKind,
)

__all__ = [
    # privilege.py
    "PrivilegeContext",
    "detect_privilege",
    # probe.py
    "Catalog",
    "Probe",
    "Section",
    "Subsection",
    # result.py
    "CommandOutcome",
    "ExecutionResult",
    "ExitStatus",
    "FailureKind",
]
