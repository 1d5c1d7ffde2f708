"""
Units, exceptions and configuration helpers.
"""
__title__ = "Utilities"
