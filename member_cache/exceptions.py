"""
Member domain exceptions.
"""

from typing import Any, Dict, Optional


class MemberException(Exception):
    """Base exception for member domain errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class MemberNotFoundException(MemberException):
    """Raised when a lookup by member id yields nothing."""

    def __init__(self, member_id: int):
        self.member_id = member_id
        super().__init__(
            message=f"Member not found: {member_id}",
            error_code="MEMBER_NOT_FOUND",
            details={"member_id": member_id},
        )
