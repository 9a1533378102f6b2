"""
OrgDesk exception hierarchy.

All domain errors inherit from OrgDeskError so the HTTP layer can render
them with a single handler. Each subclass fixes its wire ``code`` and the
HTTP status it maps to.
"""

from __future__ import annotations

from typing import Any


class OrgDeskError(Exception):
    """Base exception for all OrgDesk errors."""

    code = "orgdesk_error"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFoundError(OrgDeskError):
    """Raised when a referenced entity id does not exist."""

    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity} with id {entity_id} not found",
            {"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class CrossTenantViolation(OrgDeskError):
    """Raised when two related entities belong to different organizations."""

    code = "cross_tenant_violation"
    status_code = 409


class DuplicateMembership(OrgDeskError):
    """Raised when a user is already a member of the target organization."""

    code = "duplicate_membership"
    status_code = 409

    def __init__(self, organization_id: int, user_id: int) -> None:
        super().__init__(
            "User is already a member of this organization",
            {"organization_id": organization_id, "user_id": user_id},
        )


class UniquenessViolation(OrgDeskError):
    """Raised when a value that must be unique is already taken."""

    code = "uniqueness_violation"
    status_code = 409

    def __init__(self, entity: str, field: str, value: Any) -> None:
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            {"entity": entity, "field": field, "value": value},
        )


class UnknownOperation(OrgDeskError):
    """Raised when the RPC router has no handler for the requested name."""

    code = "unknown_operation"
    status_code = 404

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown operation: {name}", {"operation": name})


class OperationNotAllowed(OrgDeskError):
    """Raised when a mutation is invoked through the read-only GET route."""

    code = "method_not_allowed"
    status_code = 405

    def __init__(self, name: str) -> None:
        super().__init__(f"Operation {name} is a mutation and requires POST", {"operation": name})
