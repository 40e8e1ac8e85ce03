"""Extension layer — type registration via pluggy.

Plugins come from the ``settable.plugins`` entry-point group of installed
distributions and from ``*.py`` files in the project's local plugins
directory. A plugin that fails to load or register is logged and skipped.
"""

from settable.plugins.manager import PluginManager

__all__ = ["PluginManager"]
