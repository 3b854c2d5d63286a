"""Allow running as ``python -m netdiag``."""

from netdiag.cli import main

if __name__ == "__main__":
    main()
