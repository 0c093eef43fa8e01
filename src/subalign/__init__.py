"""
SubAlign - Subtitle timeline alignment utility.

Compares a translated subtitle track against the original-language track,
reports timing drift cue by cue and snaps drifted cues back onto the
original timeline.
"""

__version__ = "0.1.0";
__author__ = "SubAlign Project";
__license__ = "MIT";
