"""
EasyRanch herd monitoring core
"""

__version__ = "1.0.0"
