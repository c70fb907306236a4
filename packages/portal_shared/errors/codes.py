"""Machine-readable error codes used across the portal.

Envelope errors and HTTP error bodies carry one of these strings in ``code``
so that the admin CLI and the HTTP layer can branch without parsing messages.
Codes that only one service raises live beside that service.
"""

# Request shape: bad validation input, missing headers, malformed filters
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

# Lookup misses surfaced to admin callers
NOT_FOUND = "NOT_FOUND"

# Constraint violations reported by the Postgres substrate
CONFLICT = "CONFLICT"
ALREADY_EXISTS = "ALREADY_EXISTS"

# Admin allow-list and other access checks
POLICY_VIOLATION = "POLICY_VIOLATION"
PERMISSION_DENIED = "PERMISSION_DENIED"

# Ledger, subject store or access log could not be reached
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

# Bugs and unclassified driver errors
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
