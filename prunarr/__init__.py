"""
PrunArr - delete watched TV seasons from Sonarr
"""

__version__ = "0.2.0"
