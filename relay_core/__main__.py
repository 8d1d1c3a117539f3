import sys

from relay_core.cli import main

sys.exit(main())
