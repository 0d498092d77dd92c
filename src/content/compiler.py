"""MDX body compilation.

Turns an MDX body into a CompiledBody: module statements (``import`` /
``export``) are pulled out, JSX components and ``{expressions}`` are
checked for balance, and the remaining markdown is rendered to HTML with
Python-Markdown.  Rendering JSX is left to the display-time renderer.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import markdown

from quire.content.models import CompiledBody
from quire.errors import MdxError, MdxSyntaxError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ("fenced_code", "tables", "footnotes", "attr_list", "toc")

FENCE_OPEN = re.compile(r"^\s{0,3}(?P<fence>`{3,}|~{3,})")
INLINE_CODE = re.compile(r"(`+)(?:(?!\1).)+?\1")
ESM_LINE = re.compile(r"^(?:import|export)\s")
JSX_TAG = re.compile(
    r"<(?P<close>/)?(?P<name>[A-Z][A-Za-z0-9_.]*)(?P<attrs>(?:\{[^}]*\}|[^>{])*?)(?P<self>/)?>"
)


def _split_esm(body: str) -> tuple[list[str], list[tuple[int, str, bool]]]:
    """Separate module statements from markdown, tracking fenced code.

    Returns the ESM lines and the remaining ``(line_number, line, in_code)``
    markdown lines.  A module statement must start a block: it sits at the
    top of the body, after a blank line, or after another statement.  An
    ``import ...`` line continuing a paragraph is prose.
    """
    esm: list[str] = []
    lines: list[tuple[int, str, bool]] = []
    fence: str | None = None
    block_start = True
    for lineno, line in enumerate(body.split("\n"), start=1):
        m = FENCE_OPEN.match(line)
        if fence is None and m:
            fence = m.group("fence")
            lines.append((lineno, line, True))
            block_start = False
            continue
        if fence is not None:
            stripped = line.strip()
            if stripped.startswith(fence) and not stripped.strip(fence[0]):
                fence = None
            lines.append((lineno, line, True))
            continue
        if block_start and ESM_LINE.match(line):
            esm.append(line)
            continue
        lines.append((lineno, line, False))
        block_start = not line.strip()
    return esm, lines


def check_mdx_syntax(lines: list[tuple[int, str, bool]]) -> None:
    """Raise MdxSyntaxError on unbalanced expressions or JSX components."""
    braces: list[int] = []
    tags: list[tuple[str, int]] = []
    for lineno, line, in_code in lines:
        if in_code:
            continue
        text = INLINE_CODE.sub("", line).replace("\\{", "").replace("\\}", "")

        for ch in text:
            if ch == "{":
                braces.append(lineno)
            elif ch == "}":
                if not braces:
                    raise MdxSyntaxError("unexpected '}' with no open expression", lineno)
                braces.pop()

        for m in JSX_TAG.finditer(text):
            name = m.group("name")
            if m.group("self"):
                continue
            if not m.group("close"):
                tags.append((name, lineno))
                continue
            if not tags:
                raise MdxSyntaxError(f"closing tag </{name}> has no opening tag", lineno)
            open_name, open_line = tags.pop()
            if open_name != name:
                raise MdxSyntaxError(
                    f"expected </{open_name}> (opened on line {open_line}) but found </{name}>",
                    lineno,
                )

    if braces:
        raise MdxSyntaxError("unclosed '{' expression", braces[-1])
    if tags:
        name, lineno = tags[-1]
        raise MdxSyntaxError(f"unclosed <{name}> component", lineno)


class MdxCompiler:
    """Compiles MDX bodies with a fixed set of markdown extensions."""

    def __init__(
        self,
        extensions: list[str] | tuple[str, ...] | None = None,
        extension_configs: dict[str, dict[str, Any]] | None = None,
        check_jsx: bool = True,
    ) -> None:
        self.extensions = list(DEFAULT_EXTENSIONS if extensions is None else extensions)
        self.extension_configs = extension_configs or {}
        self.check_jsx = check_jsx

    def _markdown(self) -> markdown.Markdown:
        # Markdown instances keep state between conversions, so each compile gets its own
        try:
            return markdown.Markdown(
                extensions=self.extensions,
                extension_configs=self.extension_configs,
                output_format="html",
            )
        except (ImportError, AttributeError, TypeError, ValueError) as exc:
            raise MdxError(f"could not load markdown extensions {self.extensions}: {exc}") from exc

    def compile(
        self,
        body: str,
        *,
        frontmatter: dict[str, Any] | None = None,
        scope: dict[str, Any] | None = None,
    ) -> CompiledBody:
        """Compile ``body`` into a CompiledBody.

        Raises:
            MdxSyntaxError: The body has unbalanced JSX or expressions.
            MdxError: The configured extensions cannot be loaded.
        """
        esm, lines = _split_esm(body)
        if self.check_jsx:
            check_mdx_syntax(lines)

        source = "\n".join(line for _, line, _ in lines)
        html = self._markdown().convert(source)
        logger.debug("Compiled %d chars of MDX (%d module lines)", len(body), len(esm))
        return CompiledBody(
            compiled_source=html,
            frontmatter=dict(frontmatter or {}),
            scope=dict(scope or {}),
            esm=esm,
        )
