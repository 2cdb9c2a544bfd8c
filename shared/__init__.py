"""
Relic Shared Module
===================

Configuration, structured logging and console presentation shared by
the Relic decoder, its engine and its command-line interface.
"""

from shared.config import RelicConfig

__all__ = ["RelicConfig"]
