from importlib.metadata import PackageNotFoundError, version

from strata.application import Application
from strata.compose import compose
from strata.context import Context
from strata.exceptions import HTTPError

try:
    __version__ = version("strata")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

__all__ = ["Application", "Context", "HTTPError", "compose"]
