"""
Used when running keepsync as a command-line utility
"""

from keepsync.command import main

if __name__ == "__main__":
    main()
