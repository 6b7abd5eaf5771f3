"""
Manager modules for the guild bot.
"""

from .economy_manager import EconomyLedger

__all__ = ["EconomyLedger"]
