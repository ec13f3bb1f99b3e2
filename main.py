#!/usr/bin/env python3
"""FocusFlow entry point.

Run with:
    python main.py
    python -m focusflow
"""

from focusflow.__main__ import main


if __name__ == "__main__":
    main()
