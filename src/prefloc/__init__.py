"""prefloc: remember view preferences per directory."""

import logging

logging.getLogger("prefloc").addHandler(logging.NullHandler())
