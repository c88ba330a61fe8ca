# cgppm/__init__.py

from .cgppm import *
from .cgppm import __all__, __doc__, __version__
