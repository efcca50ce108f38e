"""
Shared helpers: configuration, derived metrics, filtering
"""
