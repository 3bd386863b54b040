#!/usr/bin/env python3
"""DANGLESCAN main entry point.

Usage::

    python main.py scan subdomains.txt fingerprints.txt
    python main.py scan subdomains.txt fingerprints.txt vulnerable.txt
    python main.py version
    python main.py config
"""

from danglescan.cli import main

if __name__ == "__main__":
    main()
