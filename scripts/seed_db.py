"""Apply the schema, then load the demo school with working passwords."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from init_db import main

if __name__ == "__main__":
    main(seed=True)
