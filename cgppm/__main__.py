# cgppm/__main__.py

import sys

from .cgppm import main

sys.exit(main())
