"""
Entry point for running the dashboard as a module.

Usage:
    python -m aiacs_dashboard [hours]
"""

from .cli import main

if __name__ == "__main__":
    main()
