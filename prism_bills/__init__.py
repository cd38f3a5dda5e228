"""
Prism Bills - Bill Domain Engine

A personal bill and account tracker engine that keeps everything in one
local document.

DESIGN PRINCIPLES:
1. "Today" is always an argument, never read behind the caller's back
2. One document, rewritten whole after every change
3. Fail soft: storage and notification problems are logged, not raised
4. Storage and notification display are swappable
"""

__version__ = "1.0.0"
__author__ = "Prism Bills Team"
