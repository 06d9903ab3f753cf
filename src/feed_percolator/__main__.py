import sys

from feed_percolator.cli import main

sys.exit(main())
