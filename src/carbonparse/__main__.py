"""Allow `python -m carbonparse`."""

import sys

from carbonparse.cli import main

sys.exit(main())
