"""
Entry point for running abibuild CLI as a module.

Usage: python -m abibuild.cli [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
