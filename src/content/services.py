"""Loading MDX content from disk.

Contains the functions that touch the filesystem: building one
ContentRecord from ``<directory>/<slug>.mdx`` and loading a whole
directory into a sorted collection.  Imports models from
``quire.content.models``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, date, datetime
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser

from quire.content.compiler import MdxCompiler
from quire.content.frontmatter import parse_frontmatter
from quire.content.models import ContentRecord, Frontmatter, LoadMode
from quire.content.tags import TagRegistry, normalize_tags
from quire.errors import CompileError, ContentError, ContentNotFoundError, MdxError

logger = logging.getLogger(__name__)

EXTENSION = ".mdx"

_OLDEST = datetime.min.replace(tzinfo=UTC)

# Missing fields in loosely written dates ("May 2021") fill from here
_DATE_DEFAULTS = datetime(1970, 1, 1)

STRING_KEYS = ("title", "subtitle", "coverImage", "author")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _parse_date(raw: Any) -> datetime | None:
    """Best-effort calendar parse; naive values are taken as UTC."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        dt = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, (int, float)):
        # epoch milliseconds, the way JS dates are stored
        try:
            return datetime.fromtimestamp(raw / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(raw, str):
        s = raw.strip().strip('"').strip("'")
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            try:
                dt = parsedate_to_datetime(s)
            except (TypeError, ValueError, IndexError):
                dt = _parse_loose_date(s)
                if dt is None:
                    return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(UTC)
    except (OverflowError, ValueError):
        return None


def _parse_loose_date(s: str) -> datetime | None:
    """Parse hand-written forms such as ``May 1, 2021`` or ``2021/05/01``."""
    try:
        return date_parser.parse(s, default=_DATE_DEFAULTS)
    except (TypeError, ValueError, OverflowError):
        return None


def normalize_date(raw: Any) -> str | None:
    """Return the UTC display form of ``raw`` (``Sat, 01 May 2021 00:00:00 GMT``).

    Returns None when ``raw`` is missing or cannot be parsed.
    """
    dt = _parse_date(raw)
    if dt is None:
        return None
    try:
        return format_datetime(dt, usegmt=True)
    except ValueError:
        return None


def _sort_key(record: ContentRecord) -> datetime:
    return _parse_date(record.frontmatter.date) or _OLDEST


# ---------------------------------------------------------------------------
# Single record
# ---------------------------------------------------------------------------


def _read_source(slug: str, path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ContentNotFoundError(slug, path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentError(slug, f"could not read {path}: {exc}") from exc
    return text.replace("\r\n", "\n").replace("\r", "\n")


def build_frontmatter(
    data: dict[str, Any],
    content_type: str,
    registry: TagRegistry | None = None,
    slug: str = "",
) -> Frontmatter:
    """Normalize raw front matter into a Frontmatter.

    ``type`` is always ``content_type``; a ``type`` key in ``data`` is
    discarded.  An unparsable date leaves ``date`` unset.
    """
    fields = dict(data)
    fields.pop("type", None)

    for key in STRING_KEYS:
        value = fields.get(key)
        if value is not None and not isinstance(value, (str, int, float, date)):
            logger.warning("%s: ignoring non-scalar %s %r", slug or "content", key, value)
            del fields[key]

    raw_date = fields.pop("date", None)
    parsed_date = normalize_date(raw_date)
    if parsed_date is not None:
        fields["date"] = parsed_date
    elif raw_date is not None:
        logger.warning("%s: unparsable date %r, leaving it out", slug or "content", raw_date)

    fields["tags"] = normalize_tags(fields.pop("tags", None), registry)
    fields["type"] = content_type
    return Frontmatter.model_validate(fields)


def get_content_by_slug(
    slug: str,
    directory: str | Path,
    content_type: str,
    *,
    compiler: MdxCompiler | None = None,
    registry: TagRegistry | None = None,
) -> ContentRecord:
    """Load ``<directory>/<slug>.mdx`` into a full ContentRecord.

    Args:
        slug: Content slug; a trailing ``.mdx`` is stripped.
        directory: Directory holding the source file.
        content_type: Label stored as ``frontmatter.type``.
        compiler: MDX compiler, defaults to ``MdxCompiler()``.
        registry: Known tags to resolve raw tags against.

    Raises:
        ContentNotFoundError: The file does not exist.
        CompileError: The MDX body failed to compile.
    """
    real_slug = slug.removesuffix(EXTENSION)
    path = Path(directory) / f"{real_slug}{EXTENSION}"
    text = _read_source(real_slug, path)

    data, content = parse_frontmatter(text)
    frontmatter = build_frontmatter(data, content_type, registry, slug=real_slug)

    compiler = compiler or MdxCompiler()
    try:
        source = compiler.compile(content, frontmatter=frontmatter.to_dict())
    except MdxError as exc:
        raise CompileError(real_slug, str(exc)) from exc

    logger.debug("Loaded %s from %s", real_slug, path)
    return ContentRecord(
        slug=real_slug,
        frontmatter=frontmatter,
        content=content,
        source=source,
    )


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------


def list_slugs(directory: str | Path) -> list[str]:
    """Slugs of the ``*.mdx`` files directly inside ``directory``, by filename."""
    directory = Path(directory)
    if not directory.is_dir():
        raise ContentNotFoundError(directory.name, directory)

    slugs: list[str] = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.suffix != EXTENSION or not entry.is_file():
            logger.debug("Skipping %s", entry)
            continue
        slugs.append(entry.name.removesuffix(EXTENSION))
    return slugs


async def get_all_content_from_directory(
    directory: str | Path,
    content_type: str,
    mode: LoadMode | str = LoadMode.SLIM,
    *,
    compiler: MdxCompiler | None = None,
    registry: TagRegistry | None = None,
) -> list[ContentRecord]:
    """Load every MDX file in ``directory``, newest first.

    Files are read and compiled concurrently.  Records with equal dates
    keep filename order; records without a date sort last.  In slim mode
    the compiled body is dropped from every record.

    The load is all-or-nothing: the first file that fails cancels the
    rest and its error is raised.
    """
    mode = LoadMode(mode)
    compiler = compiler or MdxCompiler()
    slugs = list_slugs(directory)
    logger.info("Loading %d %s file(s) from %s", len(slugs), content_type, directory)

    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(
                    asyncio.to_thread(
                        get_content_by_slug,
                        slug,
                        directory,
                        content_type,
                        compiler=compiler,
                        registry=registry,
                    )
                )
                for slug in slugs
            ]
    except ExceptionGroup as group:
        if len(group.exceptions) > 1:
            logger.warning(
                "%d files failed to load from %s, reporting the first",
                len(group.exceptions),
                directory,
            )
        raise group.exceptions[0] from None

    records = [task.result() for task in tasks]
    records.sort(key=_sort_key, reverse=True)

    if mode is LoadMode.SLIM:
        return [record.slim() for record in records]
    return records


def load_all_content(
    directory: str | Path,
    content_type: str,
    mode: LoadMode | str = LoadMode.SLIM,
    *,
    compiler: MdxCompiler | None = None,
    registry: TagRegistry | None = None,
) -> list[ContentRecord]:
    """Synchronous wrapper around get_all_content_from_directory."""
    return asyncio.run(
        get_all_content_from_directory(
            directory, content_type, mode, compiler=compiler, registry=registry
        )
    )
