from __future__ import annotations

import sys

from newkit.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
