import sys

from anerd.cli import main

sys.exit(main())
