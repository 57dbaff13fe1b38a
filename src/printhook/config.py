"""Printhook configuration using pydantic-settings.

This module defines the PrinthookSettings class that reads configuration
from environment variables with the PRINTHOOK_ prefix. Every field has a
default, so the service starts without any environment set and prints to
the first USB line printer.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.printhook.receipt.models import CutMode, ReceiptOptions


class PrinthookSettings(BaseSettings):
    """Printhook configuration from environment variables.

    All environment variables are prefixed with PRINTHOOK_ (e.g.,
    PRINTHOOK_PRINTER_DEVICE=/dev/usb/lp1).
    """

    model_config = SettingsConfigDict(
        env_prefix="PRINTHOOK_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Printer Configuration
    # -------------------------------------------------------------------------
    # Which python-escpos device to open for each print job
    printer_backend: Literal["file", "network", "dummy"] = "file"

    # Device path used by the file backend
    printer_device: str = "/dev/usb/lp0"

    # Address of a networked printer (network backend only)
    printer_host: str = ""
    printer_port: int = 9100

    # -------------------------------------------------------------------------
    # Receipt Layout
    # -------------------------------------------------------------------------
    # Characters per line at normal text size (48 fits 80mm paper, font A)
    line_width: int = 48

    cut_mode: CutMode = CutMode.PARTIAL

    print_logo: bool = False
    logo_path: str = "./logo.png"

    # Print a QR code linking to the issue, pull request or workflow run
    print_qr_codes: bool = True

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 8080

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("printer_device")
    @classmethod
    def validate_printer_device(cls, v: str) -> str:
        """Validate that the device path is not empty."""
        if not v or not v.strip():
            raise ValueError("printer_device cannot be empty")
        return v

    @field_validator("line_width")
    @classmethod
    def validate_line_width(cls, v: int) -> int:
        """Validate that the line width fits real receipt paper."""
        if not 16 <= v <= 96:
            raise ValueError("line_width must be between 16 and 96")
        return v

    @field_validator("port", "printer_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise the log level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log_level: {v}")
        return level

    @model_validator(mode="after")
    def validate_network_host(self) -> "PrinthookSettings":
        """The network backend needs somewhere to connect to."""
        if self.printer_backend == "network" and not self.printer_host.strip():
            raise ValueError("printer_host is required when printer_backend is 'network'")
        return self

    def receipt_options(self) -> ReceiptOptions:
        """Build the layout options handed to the event formatters."""
        logo_path: Optional[str] = None
        if self.print_logo:
            logo_path = str(Path(self.logo_path))
        return ReceiptOptions(
            line_width=self.line_width,
            cut_mode=self.cut_mode,
            logo_path=logo_path,
            qr_codes=self.print_qr_codes,
        )


def get_settings() -> PrinthookSettings:
    """Create and return PrinthookSettings instance.

    Returns:
        PrinthookSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If a field is set to an invalid value.
    """
    return PrinthookSettings()
