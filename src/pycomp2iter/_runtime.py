"""Callables the generated iterator chains call.

Generated code reaches these as attributes of the module bound to
``RUNTIME_NAME``, never as bare names, so names in the evaluation scope
cannot replace them.
"""

from builtins import iter, map
from itertools import chain, starmap

__all__ = ["chain", "iter", "map", "starmap"]
