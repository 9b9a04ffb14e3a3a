"""Error code constants.

Codes are stable strings for log queries and alerting; messages may change.
"""

# Collection / configuration
COLLECTION_FAILED = "COLLECTION_FAILED"
MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

# Git context
GIT_REF_NOT_FOUND = "GIT_REF_NOT_FOUND"
GIT_REF_AMBIGUOUS = "GIT_REF_AMBIGUOUS"
GIT_REPO_NOT_FOUND = "GIT_REPO_NOT_FOUND"

# Provenance
NO_OWNER_FOUND = "NO_OWNER_FOUND"
PROVENANCE_LOOKUP_FAILED = "PROVENANCE_LOOKUP_FAILED"

# Delivery
DELIVERY_FAILED = "DELIVERY_FAILED"

# Internal
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
