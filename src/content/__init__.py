"""Content domain — loading MDX files into ordered content records.

A directory of ``*.mdx`` files goes in; a list of ContentRecords, sorted
newest first, comes out.  Each record carries normalized front matter
(UTC date, TagRecords, injected content type) and, in full mode, the
compiled body.
"""

from quire.content.compiler import MdxCompiler
from quire.content.frontmatter import dump_frontmatter, parse_frontmatter
from quire.content.models import (
    CompiledBody,
    ContentRecord,
    Frontmatter,
    LoadMode,
    TagRecord,
)
from quire.content.services import (
    get_all_content_from_directory,
    get_content_by_slug,
    load_all_content,
    normalize_date,
)
from quire.content.tags import TagRegistry, normalize_tags, parse_tag, slugify

__all__ = [
    "CompiledBody",
    "ContentRecord",
    "Frontmatter",
    "LoadMode",
    "MdxCompiler",
    "TagRecord",
    "TagRegistry",
    "dump_frontmatter",
    "get_all_content_from_directory",
    "get_content_by_slug",
    "load_all_content",
    "normalize_date",
    "normalize_tags",
    "parse_frontmatter",
    "parse_tag",
    "slugify",
]
