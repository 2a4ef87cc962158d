"""Error type shared by the release tools.

Core modules raise ReleaseToolError for conditions an operator can act on
(missing log file, unknown remote URL, unresolved pull request, rejected
comment). The CLI turns it into a short message and exit status 1.
"""

from __future__ import annotations


class ReleaseToolError(RuntimeError):
    """Raised when a release tool hits a known, operator-reportable error."""
