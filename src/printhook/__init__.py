"""Print GitHub webhook events on an ESC/POS thermal receipt printer.

This package provides:
- A FastAPI webhook receiver for GitHub deliveries
- Receipt formatters for issues, pull requests and failed workflow runs
- A python-escpos driver for file, network and dummy printers
"""
