"""
VoiceTerm: speak a request, get shell commands, fill in the blanks, run them.
"""

__version__ = "0.1.0"
