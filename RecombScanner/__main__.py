import sys

from RecombScanner.cli import main

sys.exit(main())
