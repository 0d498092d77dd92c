"""Tag normalization and the known-tag registry.

Raw tags come in whatever shape an author typed into front matter: plain
strings, mappings copied from another site, sometimes numbers.  Every one
of them is turned into a TagRecord; nothing here raises.
"""

from __future__ import annotations

import hashlib
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from quire.content.models import TagRecord

logger = logging.getLogger(__name__)

SLUG_RE = re.compile(r"[^a-z0-9-]+")


def slugify(s: str) -> str:
    """Lowercase, ASCII-only, hyphen-separated identifier."""
    folded = unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"-{2,}", "-", SLUG_RE.sub("-", folded.lower()).strip("-"))


def tag_slug(name: str) -> str:
    """Slug for a tag name; falls back to a short hash when slugify yields nothing."""
    slug = slugify(name)
    if slug or not name:
        return slug
    return hashlib.sha256(name.encode("utf-8")).hexdigest()[:8]


class TagRegistry:
    """Known tags, looked up by slug or alias slug."""

    def __init__(self, tags: list[TagRecord] | None = None) -> None:
        self._by_slug: dict[str, TagRecord] = {}
        for tag in tags or []:
            self.add(tag)

    def __len__(self) -> int:
        return len({id(t) for t in self._by_slug.values()})

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def add(self, tag: TagRecord, aliases: list[str] | None = None) -> None:
        self._by_slug[tag.slug] = tag
        for alias in aliases or []:
            self._by_slug.setdefault(tag_slug(alias), tag)

    def lookup(self, slug: str) -> TagRecord | None:
        return self._by_slug.get(slug)

    @classmethod
    def from_file(cls, path: str | Path) -> TagRegistry:
        """Load a registry from a YAML list of ``{name, slug?, description?, aliases?}``.

        A missing or unreadable file gives an empty registry.
        """
        registry = cls()
        path = Path(path)
        if not path.exists():
            logger.warning("Tag registry not found: %s", path)
            return registry
        try:
            entries = yaml.safe_load(path.read_text(encoding="utf-8")) or []
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load tag registry %s: %s", path, exc)
            return registry
        if not isinstance(entries, list):
            logger.warning("Tag registry %s is not a list, ignoring it", path)
            return registry

        for entry in entries:
            if isinstance(entry, dict):
                raw_aliases = entry.get("aliases") or []
                if not isinstance(raw_aliases, list):
                    raw_aliases = [raw_aliases]
                aliases = [str(a) for a in raw_aliases]
            else:
                aliases = []
            registry.add(parse_tag(entry), aliases=aliases)
        logger.debug("Loaded %d known tags from %s", len(registry), path)
        return registry


def _from_mapping(raw: dict[Any, Any]) -> TagRecord:
    data = {str(k): v for k, v in raw.items()}
    if "name" not in data and "label" in data:
        data["name"] = data["label"]
    name = data.get("name")
    if isinstance(name, (int, float)) and not isinstance(name, bool):
        data["name"] = name = str(name)
    if isinstance(name, str) and not data.get("slug"):
        data["slug"] = tag_slug(name.strip())
    try:
        return TagRecord.model_validate(
            {k: data[k] for k in ("name", "slug", "description") if k in data}
        )
    except ValidationError:
        fallback = next(
            (v for v in data.values() if isinstance(v, str) and v.strip()), ""
        )
        logger.warning("Unrecognized tag %r, falling back to %r", raw, fallback)
        return TagRecord(name=fallback.strip(), slug=tag_slug(fallback.strip()))


def parse_tag(raw: Any, registry: TagRegistry | None = None) -> TagRecord:
    """Normalize one raw tag value into a TagRecord."""
    if isinstance(raw, str):
        name = raw.strip()
        tag = TagRecord(name=name, slug=tag_slug(name))
    elif isinstance(raw, dict):
        tag = _from_mapping(raw)
    else:
        name = "" if raw is None else str(raw)
        if not isinstance(raw, (int, float)):
            logger.warning("Unrecognized tag %r, using its string form", raw)
        tag = TagRecord(name=name, slug=tag_slug(name))

    if registry is not None:
        known = registry.lookup(tag.slug)
        if known is not None:
            return known.model_copy()
    return tag


def normalize_tags(raw_tags: Any, registry: TagRegistry | None = None) -> list[TagRecord]:
    """Normalize a front matter ``tags`` value, keeping order and length."""
    if raw_tags is None:
        return []
    if not isinstance(raw_tags, (list, tuple)):
        raw_tags = [raw_tags]
    return [parse_tag(raw, registry) for raw in raw_tags]
