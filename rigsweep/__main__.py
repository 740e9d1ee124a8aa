import sys

from rigsweep.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
