"""
Step through equality saturation of small lisp programs and watch the e-graph change.
"""

from . import config, ipython_magic  # noqa: F401
from .app import *
from .canvas import *
from .controller import *
from .engine import *
from .keys import *
from .lispy import *
from .presets import *
from .reconciler import *
from .rules import *
from .snapshot import *

del ipython_magic
