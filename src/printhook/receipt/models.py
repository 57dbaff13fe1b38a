"""Print primitive models for formatted receipts.

A FormattedReceipt is the ordered list of printer commands produced by an
event formatter for a single webhook. The commands mirror the primitives
that ESC/POS printers understand (text, emphasis, size, justification,
feed, cut, raster image, QR code) without depending on a printer driver,
so receipts can be built and inspected without any hardware attached.

The models use Pydantic for validation, consistent with the configuration
approach in config.py.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class Justification(str, Enum):
    """Horizontal alignment of the following text, images and codes."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class CutMode(str, Enum):
    """Paper cut modes supported by python-escpos."""

    PARTIAL = "PART"
    FULL = "FULL"


class TextCommand(BaseModel):
    """A run of text. Newlines are sent verbatim."""

    kind: Literal["text"] = "text"
    text: str


class EmphasisCommand(BaseModel):
    """Turn bold printing on or off."""

    kind: Literal["emphasis"] = "emphasis"
    enabled: bool


class TextSizeCommand(BaseModel):
    """Character magnification; 1x1 is the normal size."""

    kind: Literal["text_size"] = "text_size"
    width: int = Field(default=1, ge=1, le=8)
    height: int = Field(default=1, ge=1, le=8)


class JustifyCommand(BaseModel):
    kind: Literal["justify"] = "justify"
    align: Justification = Justification.LEFT


class FeedCommand(BaseModel):
    """Advance the paper by a number of lines."""

    kind: Literal["feed"] = "feed"
    lines: int = Field(default=1, ge=1)


class CutCommand(BaseModel):
    kind: Literal["cut"] = "cut"
    mode: CutMode = CutMode.PARTIAL


class ImageCommand(BaseModel):
    """Print a raster image loaded from a file on disk."""

    kind: Literal["image"] = "image"
    path: str = Field(..., min_length=1)


class QRCodeCommand(BaseModel):
    """Print a QR code encoding the given data."""

    kind: Literal["qr_code"] = "qr_code"
    data: str = Field(..., min_length=1)
    size: int = Field(default=6, ge=1, le=16)


PrintCommand = Annotated[
    Union[
        TextCommand,
        EmphasisCommand,
        TextSizeCommand,
        JustifyCommand,
        FeedCommand,
        CutCommand,
        ImageCommand,
        QRCodeCommand,
    ],
    Field(discriminator="kind"),
]


class FormattedReceipt(BaseModel):
    """Ordered printer commands rendered for one webhook event.

    Attributes:
        event_type: The GitHub event name the receipt was built for.
        commands: The commands, in the order they must be sent.
    """

    event_type: str = ""
    commands: list[PrintCommand] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to send to the printer."""
        return not self.commands

    def plain_text(self) -> str:
        """Concatenate the text runs, ignoring all styling commands.

        Feeds are rendered as blank lines so the result reads roughly
        like the printed paper.
        """
        parts = []
        for command in self.commands:
            if isinstance(command, TextCommand):
                parts.append(command.text)
            elif isinstance(command, FeedCommand):
                parts.append("\n" * command.lines)
        return "".join(parts)

    def text_lines(self) -> list[str]:
        """Return the non-empty printed lines in order."""
        return [line for line in self.plain_text().split("\n") if line.strip()]


class ReceiptOptions(BaseModel):
    """Layout options shared by all event formatters.

    Attributes:
        line_width: Characters per line at normal text size.
        cut_mode: How the paper is cut at the end of a receipt.
        logo_path: Image printed at the top of each receipt, if any.
        qr_codes: Whether to print a QR code linking back to GitHub.
    """

    line_width: int = Field(default=48, ge=16, le=96)
    cut_mode: CutMode = CutMode.PARTIAL
    logo_path: Optional[str] = None
    qr_codes: bool = True
