"""
OTS News - internal content-publishing platform.
"""

__version__ = "1.0.0"
