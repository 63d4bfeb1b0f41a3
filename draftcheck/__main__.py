import sys

from draftcheck.cli import main

sys.exit(main())
