"""
lifegate error taxonomy.

Both kinds surface to the immediate caller. Nothing here is recovered or
retried internally: lifecycle and condition decisions are deterministic,
so a retry with the same inputs reproduces the same fault.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LifegateError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


class IllegalLifecycleTransition(LifegateError):
    """
    Raised for a transition the instance state machine does not allow,
    or for a malformed container graph (nesting cycle, dangling parent).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("ILLEGAL_LIFECYCLE_TRANSITION", message, details)


class ContributorFault(LifegateError):
    """
    A condition contributor broke its contract.

    Reported by the runner as an execution error for the unit, never as
    a skip.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONTRIBUTOR_FAULT", message, details)
