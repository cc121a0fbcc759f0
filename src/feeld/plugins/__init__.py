"""Extension layer: plugin system via pluggy.

Discovery: entry_points (``feeld.plugins`` group) plus single-file plugins
from a local directory. Plugins supply the evaluator and sanitizer.
INVARIANT: Plugin failures are warnings, never errors.
"""

from feeld.plugins.hookspecs import hookimpl
from feeld.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
