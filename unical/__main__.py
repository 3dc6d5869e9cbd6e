"""
Package entry point.

Allows running the application via:

    python -m unical

This simply forwards execution to unical.cli.main().
"""

from unical.cli import main

if __name__ == "__main__":
    main()
