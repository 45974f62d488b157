"""
Domain Exceptions for demand/supply planning.

Custom exceptions enforcing business rules:
- Planning period existence and locking
- Reference data integrity
- Forecast uniqueness
- Aggregation invariants
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Planning Period Exceptions
# =============================================================================

class PeriodNotFoundError(DomainError):
    """Raised when a planning period cannot be found for the organization."""

    def __init__(self, period_id):
        message = f"Planning period '{period_id}' not found"
        super().__init__(message, code="NOT_FOUND")
        self.period_id = period_id


class PeriodLockedError(DomainError):
    """Raised when writing demand or supply into a locked period."""

    def __init__(self, period_id):
        message = f"Planning period '{period_id}' is locked and cannot be edited"
        super().__init__(message, code="LOCKED")
        self.period_id = period_id


# =============================================================================
# Demand / Supply Exceptions
# =============================================================================

class ReferenceNotFoundError(DomainError):
    """Raised when a referenced repository entity does not exist."""

    def __init__(self, entity_type: str, entity_id):
        message = f"{entity_type} '{entity_id}' not found"
        super().__init__(message, code="NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateReferenceError(DomainError):
    """Raised when a repository entity with the same name or code exists."""

    def __init__(self, entity_type: str, value: str):
        message = f"A {entity_type.lower()} named or coded '{value}' already exists"
        super().__init__(message, code="DUPLICATE")
        self.entity_type = entity_type
        self.value = value


class DuplicateForecastError(DomainError):
    """Raised when a forecast for the same client, lane and truck type exists."""

    def __init__(self, route_key: str, client_id):
        message = (
            f"A forecast for route '{route_key}' and client '{client_id}' "
            f"already exists in this period"
        )
        super().__init__(message, code="DUPLICATE")
        self.route_key = route_key
        self.client_id = client_id


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationError(DomainError):
    """Raised when data validation fails."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Validation failed for '{field}': {message}", code="VALIDATION_ERROR")
        self.field = field


# =============================================================================
# Aggregation Exceptions
# =============================================================================

class ReconciliationError(DomainError):
    """Raised when reconciliation inputs are inconsistent."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="RECONCILIATION_ERROR")
        self.details = details or {}


class InvariantViolationError(DomainError):
    """Raised when a mathematical invariant is violated."""

    def __init__(self, invariant_name: str, expected: str, actual: str):
        message = (
            f"Invariant '{invariant_name}' violated. "
            f"Expected: {expected}, Actual: {actual}"
        )
        super().__init__(message, code="INVARIANT_VIOLATION")
        self.invariant_name = invariant_name
        self.expected = expected
        self.actual = actual
