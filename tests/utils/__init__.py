# tests/utils/__init__.py

from .config_validate import make_summary
from .patch_everywhere import patch_everywhere
from .trace import TRACE, make_trace
from .workspace import CrateWorkspace, make_target, write_source

__all__ = [
    "TRACE",
    "CrateWorkspace",
    "make_summary",
    "make_target",
    "make_trace",
    "patch_everywhere",
    "write_source",
]
