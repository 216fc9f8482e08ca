import sys

from wigle_bluetooth.cli import main

if __name__ == "__main__":
    sys.exit(main())
