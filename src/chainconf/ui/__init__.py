"""
UI module for chainconf.

Provides the output side of a session:
- OutputSink - line-normalizing, color-aware stream wrapper
- CaptureSink - OutputSink over an in-memory buffer, for tests
- colorize / strip_color - ANSI helpers
"""

from chainconf.ui.output import CaptureSink, OutputSink
from chainconf.ui.text import colorize, strip_color

__all__ = [
    "OutputSink",
    "CaptureSink",
    "colorize",
    "strip_color",
]
