"""Role-based visibility of interaction records."""

from jobboard_ats.core.visibility.sanitizer import (
    assert_no_leak,
    error_response,
    guard_response,
    guarded,
    project_for_role,
)

__all__ = [
    "assert_no_leak",
    "error_response",
    "guard_response",
    "guarded",
    "project_for_role",
]
