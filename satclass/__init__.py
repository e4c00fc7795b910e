"""
Satellite identity classification from orbital state.
"""

__version__ = "1.0.0"
