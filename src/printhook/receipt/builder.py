"""Fluent builder for FormattedReceipt command sequences."""

import textwrap
from typing import Optional

from src.printhook.receipt.models import (
    CutCommand,
    CutMode,
    EmphasisCommand,
    FeedCommand,
    FormattedReceipt,
    ImageCommand,
    Justification,
    JustifyCommand,
    QRCodeCommand,
    TextCommand,
    TextSizeCommand,
)


def wrap_text(text: str, width: int) -> list[str]:
    """Wrap text to lines of at most ``width`` characters.

    Line breaks in the input are kept, so paragraphs and markdown lists in
    issue bodies survive. Blank input lines become empty strings. Words
    longer than the width (URLs, hashes) are broken across lines.

    Args:
        text: The text to wrap. CRLF and CR line endings are accepted.
        width: Maximum characters per output line.

    Returns:
        The wrapped lines, without trailing newlines.
    """
    if width < 1:
        raise ValueError("width must be at least 1")

    normalized = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not normalized:
        return []

    lines: list[str] = []
    for paragraph in normalized.split("\n"):
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(
            textwrap.wrap(
                paragraph,
                width=width,
                break_long_words=True,
                break_on_hyphens=True,
            )
        )
    return lines


class ReceiptBuilder:
    """Accumulates print commands for one receipt.

    Every method returns the builder so calls can be chained:

        >>> receipt = (
        ...     ReceiptBuilder("issues", line_width=32)
        ...     .justify(Justification.CENTER)
        ...     .text("Hello\\n")
        ...     .cut()
        ...     .build()
        ... )
    """

    def __init__(self, event_type: str = "", line_width: int = 48) -> None:
        self.event_type = event_type
        self.line_width = line_width
        self._commands: list = []

    def text(self, text: str) -> "ReceiptBuilder":
        if text:
            self._commands.append(TextCommand(text=text))
        return self

    def line(self, text: str) -> "ReceiptBuilder":
        """Emit text followed by a newline, without wrapping."""
        return self.text(f"{text}\n")

    def wrapped(self, text: str, width: Optional[int] = None) -> "ReceiptBuilder":
        """Emit text wrapped to the line width, one newline per line."""
        lines = wrap_text(text, width or self.line_width)
        if lines:
            self.text("\n".join(lines) + "\n")
        return self

    def emphasis(self, enabled: bool = True) -> "ReceiptBuilder":
        self._commands.append(EmphasisCommand(enabled=enabled))
        return self

    def size(self, width: int = 1, height: int = 1) -> "ReceiptBuilder":
        self._commands.append(TextSizeCommand(width=width, height=height))
        return self

    def justify(self, align: Justification = Justification.LEFT) -> "ReceiptBuilder":
        self._commands.append(JustifyCommand(align=align))
        return self

    def feed(self, lines: int = 1) -> "ReceiptBuilder":
        self._commands.append(FeedCommand(lines=lines))
        return self

    def cut(self, mode: CutMode = CutMode.PARTIAL) -> "ReceiptBuilder":
        self._commands.append(CutCommand(mode=mode))
        return self

    def image(self, path: str) -> "ReceiptBuilder":
        self._commands.append(ImageCommand(path=path))
        return self

    def qr_code(self, data: str, size: int = 6) -> "ReceiptBuilder":
        self._commands.append(QRCodeCommand(data=data, size=size))
        return self

    def build(self) -> FormattedReceipt:
        return FormattedReceipt(
            event_type=self.event_type,
            commands=list(self._commands),
        )
