"""XHTML to Markdown conversion for e-book content documents.

Produces the small Markdown subset that matters for retrieval: ``#``
headings, paragraphs separated by a blank line, ``-`` / ``1.`` lists,
``>`` blockquotes, ``*emphasis*`` and ``**strong**``, inline code, fenced
preformatted blocks and horizontal rules.  Everything else is flattened
to its text.  Paragraph boundaries are the only place a blank line is
emitted, which is what the paragraph chunker splits on.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

_NON_TEXT = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

_SKIP_TAGS = frozenset({"head", "title", "script", "style", "meta", "link", "noscript", "svg"})
_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_CONTAINER_TAGS = frozenset(
    {
        "html",
        "body",
        "div",
        "section",
        "article",
        "main",
        "header",
        "footer",
        "nav",
        "aside",
        "figure",
        "figcaption",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "dl",
        "dd",
        "dt",
    }
)
_BLOCKISH_INLINE = _CONTAINER_TAGS | _HEADING_TAGS | {"p", "blockquote", "li", "tr", "td", "th"}

_WHITESPACE = re.compile(r"\s+")
_SPACES = re.compile(r"[ \t]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")


def html_to_markdown(html: str) -> str:
    """Convert one XHTML document to Markdown.

    Returns an empty string when the document has no visible text.
    """
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body or soup
    return "\n\n".join(_render_blocks(root))


# ---------------------------------------------------------------------------
# Block level
# ---------------------------------------------------------------------------


def _render_blocks(parent: Tag) -> list[str]:
    blocks: list[str] = []
    pending: list[str] = []

    def flush() -> None:
        text = _clean_inline("".join(pending))
        if text:
            blocks.append(text)
        pending.clear()

    for child in parent.children:
        if isinstance(child, _NON_TEXT):
            continue
        if isinstance(child, NavigableString):
            pending.append(_WHITESPACE.sub(" ", str(child)))
            continue
        if not isinstance(child, Tag) or child.name in _SKIP_TAGS:
            continue

        name = child.name
        if name in _HEADING_TAGS:
            flush()
            text = _clean_inline(_render_inline(child)).replace("\n", " ")
            if text:
                blocks.append(f"{'#' * int(name[1])} {text}")
        elif name == "p":
            flush()
            text = _clean_inline(_render_inline(child))
            if text:
                blocks.append(text)
        elif name in ("ul", "ol"):
            flush()
            rendered = _render_list(child, depth=0)
            if rendered:
                blocks.append(rendered)
        elif name == "blockquote":
            flush()
            inner = _render_blocks(child)
            if inner:
                blocks.append(_quote(inner))
        elif name == "pre":
            flush()
            code = child.get_text().strip("\n")
            if code.strip():
                blocks.append(f"```\n{code}\n```")
        elif name == "hr":
            flush()
            blocks.append("---")
        elif name == "tr":
            flush()
            cells = [
                _clean_inline(_render_inline(cell))
                for cell in child.find_all(["td", "th"], recursive=False)
            ]
            row = " | ".join(cell for cell in cells if cell)
            if row:
                blocks.append(row)
        elif name in _CONTAINER_TAGS:
            flush()
            blocks.extend(_render_blocks(child))
        else:
            pending.append(_render_inline(child))

    flush()
    return blocks


def _render_list(tag: Tag, depth: int) -> str:
    ordered = tag.name == "ol"
    lines: list[str] = []
    number = 0
    for item in tag.find_all("li", recursive=False):
        number += 1
        marker = f"{number}." if ordered else "-"
        text = _clean_inline(_render_inline(item, exclude=("ul", "ol"))).replace("\n", " ")
        if text:
            lines.append(f"{'  ' * depth}{marker} {text}")
        for nested in item.find_all(["ul", "ol"], recursive=False):
            rendered = _render_list(nested, depth + 1)
            if rendered:
                lines.append(rendered)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Inline level
# ---------------------------------------------------------------------------


def _render_inline(node: Tag, exclude: tuple[str, ...] = ()) -> str:
    parts: list[str] = []
    for child in node.children:
        if isinstance(child, _NON_TEXT):
            continue
        if isinstance(child, NavigableString):
            parts.append(_WHITESPACE.sub(" ", str(child)))
            continue
        if not isinstance(child, Tag) or child.name in _SKIP_TAGS or child.name in exclude:
            continue

        name = child.name
        if name == "br":
            parts.append("\n")
        elif name in ("em", "i", "cite"):
            parts.append(_wrap(_render_inline(child), "*"))
        elif name in ("strong", "b"):
            parts.append(_wrap(_render_inline(child), "**"))
        elif name == "code":
            parts.append(_wrap(child.get_text(), "`"))
        elif name == "a":
            text = _render_inline(child)
            href = child.get("href") or ""
            if href.startswith(("http://", "https://")) and text.strip():
                parts.append(f"[{text.strip()}]({href})")
            else:
                parts.append(text)
        elif name == "img":
            alt = child.get("alt") or ""
            if alt.strip():
                parts.append(alt.strip())
        elif name in ("ul", "ol"):
            parts.append(" " + _render_list(child, depth=0).replace("\n", " ") + " ")
        elif name in _BLOCKISH_INLINE:
            parts.append(" " + _render_inline(child) + " ")
        else:
            parts.append(_render_inline(child))
    return "".join(parts)


def _wrap(text: str, marker: str) -> str:
    """Wrap *text* in *marker*, keeping surrounding whitespace outside it."""
    stripped = text.strip()
    if not stripped:
        return text
    leading = " " if text[:1].isspace() else ""
    trailing = " " if text[-1:].isspace() else ""
    return f"{leading}{marker}{stripped}{marker}{trailing}"


def _clean_inline(text: str) -> str:
    text = _SPACES.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    return text.strip()


def _quote(blocks: list[str]) -> str:
    # Blank lines inside the quote become ">" so the quote stays one paragraph.
    lines: list[str] = []
    for position, block in enumerate(blocks):
        if position:
            lines.append(">")
        lines.extend(f"> {line}" if line else ">" for line in block.split("\n"))
    return "\n".join(lines)
