"""
Package entry point.

Allows running the application via:

    python -m weekplanner

This simply forwards execution to weekplanner.cli.main().
"""

from weekplanner.cli import main

if __name__ == "__main__":
    main()
