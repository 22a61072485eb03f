#!/usr/bin/env python3
"""
Entry point for the remix bank CLI.

Run with: python -m server
"""

from .cli import cli

if __name__ == '__main__':
    cli()
