"""python-escpos printer driver."""

from src.printhook.printer.driver import (
    PrinterError,
    ReceiptPrinter,
    create_printer_factory,
    open_printer,
    print_receipt,
)

__all__ = [
    "PrinterError",
    "ReceiptPrinter",
    "create_printer_factory",
    "open_printer",
    "print_receipt",
]
