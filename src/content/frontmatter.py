"""YAML front matter splitting for MDX source files."""

from __future__ import annotations

import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split ``text`` into a metadata mapping and the body.

    Files without a well-formed block (no opening or closing ``---``,
    YAML that does not load, or YAML that is not a mapping) come back as
    ``({}, text)`` with the body untouched.
    """
    stripped = text.lstrip("\ufeff")
    lines = stripped.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return {}, text

    for i in range(1, len(lines)):
        if lines[i].rstrip("\r\n").rstrip() == DELIMITER:
            fm_text = "".join(lines[1:i])
            body = "".join(lines[i + 1 :])
            break
    else:
        logger.debug("Front matter block is never closed, treating file as body")
        return {}, text

    try:
        data = yaml.safe_load(fm_text)
    except yaml.YAMLError as exc:
        logger.warning("Malformed YAML front matter, ignoring it: %s", exc)
        return {}, text

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        logger.warning(
            "Front matter is a %s, not a mapping; ignoring it", type(data).__name__
        )
        return {}, text
    return {str(k): v for k, v in data.items()}, body


def dump_frontmatter(data: dict[str, Any], body: str = "") -> str:
    """Serialize ``data`` as a front matter block followed by ``body``."""
    if not data:
        return f"{DELIMITER}\n{DELIMITER}\n{body}"
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip()
    return f"{DELIMITER}\n{dumped}\n{DELIMITER}\n{body}"
