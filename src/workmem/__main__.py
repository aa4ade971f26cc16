"""Main entry point for the workmem CLI.

Usage:
    python -m workmem --help
    workmem --help  # If installed via pip/uv
"""

from workmem.cli import main

if __name__ == "__main__":
    main()
