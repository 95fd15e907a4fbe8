"""
Plugin loader for discovering plugin classes on disk.
"""

import importlib.util
import logging
from pathlib import Path
from typing import Optional, Union

from .plugin import Plugin

logger = logging.getLogger(__name__)

DEFAULT_PLUGINS_DIR = Path(__file__).parent / "plugins"


def _is_plugin_class(obj) -> bool:
    return isinstance(obj, type) and issubclass(obj, Plugin)


class PluginLoader:
    """
    Discovers Plugin classes from a module or a directory of plugins.

    A path may export its plugins explicitly: a .py file, or a directory
    whose __init__.py defines PLUGINS as a list of Plugin subclasses.
    Otherwise every subdirectory must contain:
    - plugin.py with a get_plugin() factory returning a Plugin subclass
    """

    def __init__(self):
        self.excluded_dirs = {'__pycache__', '.git', '.venv', '.tmp'}

    def load(self, path: Union[str, Path]) -> list[type[Plugin]]:
        """
        Load plugin classes from a path.

        Args:
            path: Plugin module file or plugins directory

        Returns:
            Plugin classes in registration order

        Raises:
            FileNotFoundError: If the path does not exist
            NotADirectoryError: If the path is neither a module nor a directory
        """
        path = Path(path)

        explicit = self._load_explicit(path)
        if explicit is not None:
            return explicit

        plugins = []
        for name in self.discover_plugins(path):
            plugin = self.load_plugin(path, name)
            if plugin is not None:
                plugins.append(plugin)
        return plugins

    def discover_plugins(self, root_dir: Path) -> list[str]:
        """
        Find all subdirectories that contain a plugin module.

        Returns:
            Sorted list of plugin directory names
        """
        plugins = []

        for item in sorted(root_dir.iterdir()):
            if not item.is_dir():
                continue
            if item.name in self.excluded_dirs or item.name.startswith('.'):
                continue

            if (item / "plugin.py").exists():
                plugins.append(item.name)
                logger.debug(f"Discovered plugin: {item.name}")

        return plugins

    def load_plugin(self, root_dir: Path, name: str) -> Optional[type[Plugin]]:
        """
        Load a single plugin class by directory name.

        Args:
            root_dir: Plugins directory
            name: Directory name of the plugin

        Returns:
            Plugin subclass or None if loading fails
        """
        plugin_path = root_dir / name / "plugin.py"

        try:
            module = self._import(f"lychii_plugins.{name}", plugin_path)

            if hasattr(module, 'get_plugin'):
                plugin = module.get_plugin()
                if _is_plugin_class(plugin):
                    return plugin
                logger.error(f"get_plugin() in {name} did not return a Plugin subclass")
            else:
                logger.error(f"No get_plugin() in {name}/plugin.py")

        except Exception as e:
            logger.exception(f"Failed to load plugin '{name}': {e}")

        return None

    def _load_explicit(self, path: Path) -> Optional[list[type[Plugin]]]:
        """Return the PLUGINS exported by the path's module, or None if it has none."""
        if path.is_file():
            module_path = path
        elif path.is_dir():
            module_path = path / "__init__.py"
            if not module_path.exists():
                return None
        elif not path.exists():
            raise FileNotFoundError(f"Plugin path not found: {path}")
        else:
            raise NotADirectoryError(f"Plugin path is not a module or directory: {path}")

        module = self._import(f"lychii_plugins.{path.stem}", module_path)
        exported = getattr(module, "PLUGINS", None)
        if not isinstance(exported, (list, tuple)):
            if path.is_file():
                raise ValueError(f"{path} does not define a PLUGINS list")
            return None

        plugins = []
        for plugin in exported:
            if _is_plugin_class(plugin):
                plugins.append(plugin)
            else:
                logger.error(f"Ignoring non-plugin entry {plugin!r} in {module_path}")
        return plugins

    @staticmethod
    def _import(module_name: str, module_path: Path):
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
