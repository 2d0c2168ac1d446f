"""Rich document to markdown conversion.

Code blocks are detected two ways: explicit ``` marker paragraphs, and
paragraphs typeset mostly in a monospace font. The monospace check is an
approximate heuristic; ambiguous formatting converts lossily.
"""

from __future__ import annotations

import re
from typing import Iterable

from docwiki.providers.content_types import DocumentElement, ListItem, Paragraph, Table, TextSpan

FENCE = "```"
MONOSPACE_PATTERN = re.compile(r"courier|consolas|mono", re.IGNORECASE)
MONOSPACE_THRESHOLD = 0.7


class ConversionError(Exception):
    """The document tree could not be walked."""


def monospace_ratio(spans: Iterable[tuple[str, int]]) -> float:
    """Share of characters set in a monospace font.

    Args:
        spans: (font_family, span_length) pairs

    Returns:
        Ratio in [0, 1]; 0.0 when there are no characters
    """
    total = 0
    mono = 0
    for family, length in spans:
        total += length
        if family and MONOSPACE_PATTERN.search(family):
            mono += length
    return mono / total if total else 0.0


def is_code_paragraph(spans: Iterable[TextSpan]) -> bool:
    pairs = [(span.font_family, len(span.text)) for span in spans]
    return monospace_ratio(pairs) > MONOSPACE_THRESHOLD


def table_to_markdown(table: Table) -> list[str]:
    """GitHub-style table: first row is the header."""
    lines = []
    for i, row in enumerate(table.rows):
        cells = [cell.replace("\r", " ").replace("\n", " ").strip() for cell in row]
        lines.append("| " + " | ".join(cells) + " |")
        if i == 0:
            lines.append("| " + " | ".join("---" for _ in cells) + " |")
    if lines:
        lines.append("")
    return lines


class _Converter:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.in_fence = False
        self.in_list = False
        self.code: list[str] = []

    def end_list(self) -> None:
        if self.in_list:
            self.lines.append("")
            self.in_list = False

    def flush_code(self) -> None:
        """Emit the pending implicit code block, fenced."""
        if not self.code:
            return
        self.lines.append(FENCE)
        self.lines.extend(self.code)
        self.lines.append(FENCE)
        self.lines.append("")
        self.code = []

    def paragraph(self, element: Paragraph) -> None:
        text = element.text
        self.end_list()

        if text.strip().startswith(FENCE):
            self.flush_code()
            self.lines.append(text)
            self.in_fence = not self.in_fence
            return

        if self.in_fence:
            self.lines.append(text)
            return

        if is_code_paragraph(element.spans):
            self.code.append(text)
            return

        self.flush_code()
        if 1 <= element.heading_level <= 6:
            self.lines.append("#" * element.heading_level + " " + text.strip())
        elif not text.strip():
            self.lines.append("")
        else:
            self.lines.append(text)
            self.lines.append("")

    def list_item(self, element: ListItem) -> None:
        self.flush_code()
        marker = "1." if element.ordered else "-"
        self.lines.append("  " * element.nesting_level + f"{marker} {element.text.strip()}")
        self.in_list = True

    def table(self, element: Table) -> None:
        self.flush_code()
        self.end_list()
        self.lines.extend(table_to_markdown(element))

    def finish(self) -> str:
        self.flush_code()
        if self.in_fence:
            self.lines.append(FENCE)
        text = re.sub(r"\n{3,}", "\n\n", "\n".join(self.lines)).strip()
        return text + "\n" if text else ""


def to_markdown(elements: Iterable[DocumentElement]) -> str:
    """Convert top-level document elements to markdown text.

    Raises:
        ConversionError: If an element cannot be converted
    """
    converter = _Converter()
    try:
        for element in elements:
            if isinstance(element, Paragraph):
                converter.paragraph(element)
            elif isinstance(element, ListItem):
                converter.list_item(element)
            elif isinstance(element, Table):
                converter.table(element)
            else:
                raise TypeError(f"Unsupported document element: {type(element).__name__}")
    except Exception as e:
        raise ConversionError(f"Document conversion failed: {e}") from e
    return converter.finish()
