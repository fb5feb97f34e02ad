"""
Package entry point.

Allows running the application via:

    python -m weektable

This simply forwards execution to weektable.cli.main().
"""

from weektable.cli import main

if __name__ == "__main__":
    main()
