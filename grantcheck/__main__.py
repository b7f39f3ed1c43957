import sys

from grantcheck.cli import main

sys.exit(main())
