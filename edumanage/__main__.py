"""
Package entry point.

Allows running the application via:

    python -m edumanage

This simply forwards execution to edumanage.cli.main().
"""

from edumanage.cli import main

if __name__ == "__main__":
    main()
