import sys

from apisnip.cli import main

sys.exit(main())
