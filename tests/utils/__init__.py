# tests/utils/__init__.py

from .builders import make_args, make_graph, make_options, make_project
from .config_validate import make_summary
from .fake_compiler import FakeCompiler
from .force_mtime_advance import force_mtime_advance
from .trace import TRACE, make_trace

__all__ = [
    "TRACE",
    "FakeCompiler",
    "force_mtime_advance",
    "make_args",
    "make_graph",
    "make_options",
    "make_project",
    "make_summary",
    "make_trace",
]
