#!/usr/bin/env python3
"""Version information for cmdwise"""

__version__ = "0.4.0"
__status__ = "BETA"
