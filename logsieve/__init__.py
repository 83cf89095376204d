"""
A log filter driven by example lines.
Lines matching the known message shapes of a rule set are dropped,
the remaining lines are handed out so that novel messages surface.
Log files are read incrementally, remembering the position
between runs even across log rotation.
"""

__version__ = '0.1.0'
