"""AST nodes for the Carbon subset."""

from ._node import *
from ._decl import *
from ._stmt import *
from ._expr import *
