"""
Entry point for running nativedep as a module.

Usage: python -m nativedep [command] [options]
"""

from nativedep.cli.parser import main

if __name__ == "__main__":
    main()
