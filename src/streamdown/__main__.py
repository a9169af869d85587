import sys

from streamdown.cli import main

sys.exit(main())
