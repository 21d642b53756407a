#!/usr/bin/env python3

"""
iocsift - extract Indicators of Compromise from logs, reports and artifacts

Entry point for ``python -m iocsift``.
"""

from colorama import init

from iocsift.main import main

# Initialize colorama only when running as a script, not when imported
init(autoreset=True)

main()
