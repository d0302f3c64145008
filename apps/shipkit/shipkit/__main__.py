import sys

from shipkit.cli import main

sys.exit(main())
