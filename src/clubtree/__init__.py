"""
Club member tree engine: hierarchy, expand/collapse state, layout,
enter/update/exit reconciliation and auto-fit viewport.
"""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("clubtree")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
