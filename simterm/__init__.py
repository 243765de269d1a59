"""simterm — a simulated developer terminal.

An in-process shell engine: a virtual filesystem, over 70 simulated developer
commands, bounded command history, ranked autocomplete and regex syntax
highlighting, bundled behind the :class:`~simterm.api.Terminal` facade.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("simterm")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Source checkout without an install

from simterm.api import Terminal
from simterm.kernel.config import SimTermConfig, load_config
from simterm.kernel.domain import OutputEntry, OutputLevel

__all__ = [
    "OutputEntry",
    "OutputLevel",
    "SimTermConfig",
    "Terminal",
    "__version__",
    "load_config",
]
