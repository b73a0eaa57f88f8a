import sys

from rocketshoes.cli import main

sys.exit(main())
