import sys

from lazycompass.cli import main

sys.exit(main())
