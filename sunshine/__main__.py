import sys

from sunshine.cli import main

sys.exit(main())
