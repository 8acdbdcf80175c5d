"""Allow running the CLI with ``python -m s3vfs``."""

import sys

from s3vfs.cli import main

sys.exit(main())
