"""
Relic Module Entry Point
=========================

Allows running the Relic CLI via: python -m relic
"""

from relic.cli import main

if __name__ == "__main__":
    main()
