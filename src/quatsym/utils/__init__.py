"""Shared utility functions and classes"""
# List exported symbols for doc generation
__all__ = ("ceildiv", "StopWatch", "stopwatch")

from ._math import ceildiv
from ._stopwatch import StopWatch, stopwatch
