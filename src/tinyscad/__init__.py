"""tinyscad: a small declarative solid-modeling language for printable parts."""

__version__ = "0.1.0"

from tinyscad.evaluator import evaluate  # noqa: E402
from tinyscad.lexer import tokenize  # noqa: E402
from tinyscad.mesh import compute_bounds, compute_normal  # noqa: E402
from tinyscad.metadata import parse_metadata  # noqa: E402
from tinyscad.parser import parse_program  # noqa: E402
from tinyscad.stl import to_ascii_stl  # noqa: E402
from tinyscad.templates import load_template  # noqa: E402

__all__ = [
    "__version__",
    "compute_bounds",
    "compute_normal",
    "evaluate",
    "load_template",
    "parse_metadata",
    "parse_program",
    "to_ascii_stl",
    "tokenize",
]
