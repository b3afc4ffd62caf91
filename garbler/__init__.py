"""
Garbler: character-level statistics for procedural word generation.
"""

__version__ = "0.1.0"
