"""
Launcher for running PrunArr from a checkout: python prunarr.py tv
"""

from prunarr.cli import main

if __name__ == "__main__":
    main()
