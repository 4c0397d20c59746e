"""
Timewise - booking availability settings and resolution.
"""

__version__ = "0.1.0"
