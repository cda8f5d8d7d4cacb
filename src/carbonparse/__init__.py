"""
Carbon Parser

A syntactic front end for a subset of the Carbon programming language:
function and variable declarations, a small expression language and
comments. Source text is matched by a packrat parsing engine against a
declarative grammar rule table, producing a parse tree that is then turned
into a typed AST.
"""

__version__ = "0.1.2"


from ._error import *
from ._diag import *
from ._tree import *
from ._grammar import *
from ._engine import *
from . import ast
from ._build import *
