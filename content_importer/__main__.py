import sys

from content_importer.cli import main

if __name__ == "__main__":
    sys.exit(main())
