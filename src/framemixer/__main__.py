"""Command-line interface."""
import sys

from framemixer.main import main

if __name__ == "__main__":
    sys.exit(main())
