"""Allow running as python -m ignored_export."""

import sys

from .cli import main

sys.exit(main())
