"""Allow running the renderer with ``python -m spheretracer``."""

import sys

from spheretracer.cli import main

sys.exit(main())
