"""Allow ``python -m gesture_templates``."""
import sys

from .cli import main

sys.exit(main())
