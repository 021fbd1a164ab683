"""Version information for the EdgeGrid Python client"""

__version__ = "1.0.0"
