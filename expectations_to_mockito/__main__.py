"""Main entry point for running expectations-to-mockito as a module.

This allows users to run the CLI with:
    python -m expectations_to_mockito [command] [options]
"""

from .cli import main

if __name__ == "__main__":
    main()
