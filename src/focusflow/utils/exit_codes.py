"""
Exit codes for FocusFlow.

Semantic exit codes so scripts wrapping the CLI can tell what happened.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Session store could not be read or written
ERROR_STORAGE = 3

# Resource not found
ERROR_NOT_FOUND = 5
