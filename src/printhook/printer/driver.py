"""ESC/POS printer driver built on python-escpos.

This module executes FormattedReceipt commands against a python-escpos
device. It supports three backends, selected by configuration:

- file: a character device such as /dev/usb/lp0 (the default)
- network: a raw TCP printer, usually on port 9100
- dummy: an in-memory device that keeps the generated bytes

A ReceiptPrinter owns one device for the lifetime of one print job and
always closes it, whether the job succeeds or fails.
"""

from typing import Callable, Optional

import structlog
from escpos import exceptions as escpos_exceptions
from escpos.escpos import Escpos
from escpos.printer import Dummy, File, Network

from src.printhook.config import PrinthookSettings
from src.printhook.receipt.models import (
    CutCommand,
    EmphasisCommand,
    FeedCommand,
    FormattedReceipt,
    ImageCommand,
    JustifyCommand,
    QRCodeCommand,
    TextCommand,
    TextSizeCommand,
)

logger = structlog.get_logger()

PrinterFactory = Callable[[], Escpos]


class PrinterError(Exception):
    """Raised when the printer cannot be opened or a command fails."""


def open_printer(settings: PrinthookSettings) -> Escpos:
    """Create the python-escpos device for the configured backend.

    The device connection itself is opened lazily by python-escpos on the
    first write, so a missing device surfaces when printing starts.

    Args:
        settings: Printhook settings naming the backend and its address.

    Returns:
        An unopened python-escpos device.
    """
    if settings.printer_backend == "dummy":
        return Dummy()
    if settings.printer_backend == "network":
        return Network(settings.printer_host, port=settings.printer_port)
    return File(devfile=settings.printer_device)


def create_printer_factory(settings: PrinthookSettings) -> PrinterFactory:
    """Bind settings into a zero-argument factory, one device per call."""

    def factory() -> Escpos:
        return open_printer(settings)

    return factory


class ReceiptPrinter:
    """Executes receipt commands on a python-escpos device.

    Usage:
        >>> with ReceiptPrinter(Dummy()) as printer:
        ...     printer.print_receipt(receipt)

    Attributes:
        device: The underlying python-escpos device.
    """

    def __init__(self, device: Escpos) -> None:
        self.device = device
        self._closed = False
        self._handlers = {
            "text": self._text,
            "emphasis": self._emphasis,
            "text_size": self._text_size,
            "justify": self._justify,
            "feed": self._feed,
            "cut": self._cut,
            "image": self._image,
            "qr_code": self._qr_code,
        }

    def __enter__(self) -> "ReceiptPrinter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def print_receipt(self, receipt: FormattedReceipt) -> None:
        """Reset the printer and send every command in order.

        Raises:
            PrinterError: If the device cannot be reached or rejects a
                command.
        """
        try:
            self.device.hw("INIT")
            for command in receipt.commands:
                self._handlers[command.kind](command)
        except (escpos_exceptions.Error, OSError) as e:
            raise PrinterError(str(e) or type(e).__name__) from e

        logger.debug(
            "Receipt sent to printer",
            event_type=receipt.event_type,
            commands=len(receipt.commands),
        )

    def close(self) -> None:
        """Release the device. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self.device.close()
        except (escpos_exceptions.Error, OSError) as e:
            raise PrinterError(f"Failed to close printer: {e}") from e

    # -------------------------------------------------------------------------
    # Command handlers
    # -------------------------------------------------------------------------

    def _text(self, command: TextCommand) -> None:
        self.device.text(command.text)

    def _emphasis(self, command: EmphasisCommand) -> None:
        self.device.set(bold=command.enabled)

    def _text_size(self, command: TextSizeCommand) -> None:
        if command.width == 1 and command.height == 1:
            self.device.set(normal_textsize=True)
        else:
            self.device.set(
                custom_size=True,
                width=command.width,
                height=command.height,
            )

    def _justify(self, command: JustifyCommand) -> None:
        self.device.set(align=command.align.value)

    def _feed(self, command: FeedCommand) -> None:
        self.device.ln(command.lines)

    def _cut(self, command: CutCommand) -> None:
        self.device.cut(mode=command.mode.value)

    def _image(self, command: ImageCommand) -> None:
        try:
            self.device.image(command.path)
        except (OSError, ValueError, escpos_exceptions.ImageWidthError) as e:
            logger.warning("Skipping unprintable image", path=command.path, error=str(e))

    def _qr_code(self, command: QRCodeCommand) -> None:
        self.device.qr(command.data, size=command.size)


def print_receipt(
    receipt: FormattedReceipt,
    factory: PrinterFactory,
) -> Optional[bytes]:
    """Open a device, print one receipt and close the device.

    Returns:
        The generated bytes when the device is a Dummy, otherwise None.
    """
    with ReceiptPrinter(factory()) as printer:
        printer.print_receipt(receipt)
        if isinstance(printer.device, Dummy):
            return printer.device.output
    return None
