"""Command-line interface."""
import sys

from assetloader.main import main

if __name__ == "__main__":
    sys.exit(main())
