"""
Entry point for running abibuild as a module.

Usage: python -m abibuild [options]
"""

from abibuild.cli.parser import main

if __name__ == "__main__":
    main()
