"""
dnsdeck - manage DNS zones and records across several cloud DNS providers.
"""

__version__ = "0.1.0"
