"""
App Mirror — Local mirror of selected app store definitions.
"""

__version__ = "0.1.0"
