import sys

from zkfetch.cli import main

sys.exit(main())
