#!/usr/bin/env python3
"""LanePace entry point.

Run with:
    python main.py
    python -m lanepace
"""

from lanepace.__main__ import main


if __name__ == "__main__":
    main()
