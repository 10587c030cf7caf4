import sys

from diffevo.cli import main

sys.exit(main())
