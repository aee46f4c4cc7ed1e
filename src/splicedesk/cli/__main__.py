#!/usr/bin/env python3
"""
CLI entry point for splicedesk.cli module.

This allows running: python -m splicedesk.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
