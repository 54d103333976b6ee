"""
set-advisor: weight and rep suggestions for the next resistance-training set.
"""

__version__ = "0.1.0"
