import sys

from whaleshrink.cli import main

sys.exit(main())
