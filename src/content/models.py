"""Content domain models — pure Pydantic v2 data types.

These models describe what the loader hands to the page layer: a
ContentRecord per MDX file, its normalized front matter, the tags it
carries, and the compiled body produced by the MDX compiler.  No I/O
lives here.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoadMode(StrEnum):
    """How much of each record a directory load returns."""

    SLIM = "slim"
    FULL = "full"


class TagRecord(BaseModel):
    """A normalized tag."""

    name: str
    slug: str
    description: str | None = None


class CompiledBody(BaseModel):
    """Serialized, renderer-ready form of an MDX body."""

    model_config = ConfigDict(populate_by_name=True)

    compiled_source: str = Field(alias="compiledSource")
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    scope: dict[str, Any] = Field(default_factory=dict)
    esm: list[str] = Field(default_factory=list)


class Frontmatter(BaseModel):
    """Front matter of a content file after normalization.

    Known keys are typed; any other key found in the source file is kept
    as-is.  ``date`` is either a UTC display string or unset, and ``tags``
    is always a list.  ``type`` comes from the caller, never from the file.
    """

    # source key names only, so a literal `cover_image` key stays an extra
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    subtitle: str | None = None
    date: str | None = None
    cover_image: str | None = Field(default=None, alias="coverImage")
    author: str | None = None
    type: str
    tags: list[TagRecord] = Field(default_factory=list)

    @field_validator("title", "subtitle", "author", "cover_image", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        # YAML happily turns `title: 2021` into an int
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value

    def to_dict(self) -> dict[str, Any]:
        """Dump with source key names, leaving out keys that were never set."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(self.model_extra or {})
        # tags and type are always part of the output
        data["type"] = self.type
        data["tags"] = [tag.model_dump(exclude_none=True) for tag in self.tags]
        return data


class ContentRecord(BaseModel):
    """One content item loaded from ``<directory>/<slug>.mdx``."""

    slug: str
    frontmatter: Frontmatter
    content: str
    source: CompiledBody | None = None

    def slim(self) -> ContentRecord:
        """Return a copy without the compiled body."""
        return self.model_copy(update={"source": None})

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict; ``source`` only appears when it was compiled."""
        data: dict[str, Any] = {
            "slug": self.slug,
            "frontmatter": self.frontmatter.to_dict(),
            "content": self.content,
        }
        if self.source is not None:
            data["source"] = self.source.model_dump(by_alias=True)
        return data
