"""PathGuard — confine user-supplied paths to a base directory.

Pure logic, no I/O. Normalization is lexical (``os.path.normpath``), so
symlinks inside a base directory are not followed or checked; callers decide
whether the resolved path must exist.
"""

from __future__ import annotations

import os
from pathlib import Path

from cfs.errors import InvalidInputError, TraversalError


class PathGuard:
    """Resolve candidate paths against a fixed base directory."""

    def __init__(self, base: Path) -> None:
        self._base = Path(os.path.normpath(os.fspath(base)))
        if not self._base.is_absolute():
            raise ValueError(f"Base directory must be absolute: {base}")

    @property
    def base(self) -> Path:
        return self._base

    def resolve(self, candidate: str) -> Path:
        """Join *candidate* onto the base, normalize, and check containment.

        Containment is checked per path segment, so ``/srv/base-evil`` is not
        inside ``/srv/base``. An absolute *candidate* replaces the base and is
        accepted only if it still lands inside it.

        Raises:
            TraversalError: If the normalized path leaves the base directory.
            InvalidInputError: If *candidate* contains a NUL byte.
        """
        _reject_nul(candidate)
        base = os.fspath(self._base)
        resolved = os.path.normpath(os.path.join(base, candidate))
        if not is_within(base, resolved):
            raise TraversalError(candidate, base)
        return Path(resolved)

    @staticmethod
    def filename_only(candidate: str) -> str:
        """Return *candidate* unchanged if it is a bare file name.

        The final path component is extracted; if it differs from the
        original string the candidate carried a separator and is rejected.

        Raises:
            InvalidInputError: On any path separator or NUL byte.
        """
        _reject_nul(candidate)
        if os.path.basename(candidate) != candidate:
            raise InvalidInputError("Invalid characters or path components in filename.")
        if os.altsep and os.altsep in candidate:
            raise InvalidInputError("Invalid characters or path components in filename.")
        return candidate


def is_within(base: str, path: str) -> bool:
    """Return whether normalized *path* equals *base* or lies below it."""
    try:
        return os.path.commonpath([base, path]) == base
    except ValueError:
        # Different drives, or a mix of absolute and relative paths.
        return False


def _reject_nul(candidate: str) -> None:
    if "\x00" in candidate:
        raise InvalidInputError("Path must not contain NUL bytes.")
