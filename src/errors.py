"""Errors raised while loading content.

Only two conditions are fatal for a slug: the file is missing, or its body
does not compile. Everything else (missing front matter, unparsable dates,
odd tag shapes) degrades quietly inside the loader.
"""

from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base error for a single content item."""

    def __init__(self, slug: str, message: str) -> None:
        self.slug = slug
        super().__init__(f"{slug}: {message}")


class ContentNotFoundError(ContentError):
    """The source file (or directory) for a slug does not exist."""

    def __init__(self, slug: str, path: Path) -> None:
        self.path = path
        super().__init__(slug, f"no such file {path}")


class CompileError(ContentError):
    """The MDX body of a slug failed to compile."""

    def __init__(self, slug: str, reason: str) -> None:
        self.reason = reason
        super().__init__(slug, f"failed to compile MDX: {reason}")


class MdxError(Exception):
    """The MDX compiler could not produce a compiled body."""


class MdxSyntaxError(MdxError):
    """Malformed MDX detected by the compiler."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
