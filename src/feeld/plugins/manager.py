"""Plugin discovery and collaborator lookup.

Plugins come from two places:

- installed distributions advertising the ``feeld.plugins`` entry point
  group (an entry point may name a module, an instance or a class);
- single ``*.py`` files in the project's local plugin directory
  (``.feeld/plugins/`` by default). Files starting with ``_`` are skipped.

A local file may define ``@hookimpl`` functions at module level, classes
whose methods carry ``@hookimpl``, or both. Loading problems are logged and
never abort discovery.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from feeld.plugins.hookspecs import PROJECT_NAME, FeeldHookSpec

if TYPE_CHECKING:
    from feeld.domain.collaborators import Evaluator, Sanitizer

ENTRY_POINT_GROUP = "feeld.plugins"
LOCAL_MODULE_PREFIX = "feeld_local_plugin_"

logger = logging.getLogger(__name__)

_IMPL_MARKER = f"{PROJECT_NAME}_impl"


def _is_hookimpl(obj: object) -> bool:
    return callable(obj) and getattr(obj, _IMPL_MARKER, None) is not None


def _declares_hooks(owner: type | ModuleType) -> bool:
    """True if *owner* has a public attribute marked with ``@hookimpl``."""
    return any(
        _is_hookimpl(getattr(owner, name, None))
        for name in dir(owner)
        if not name.startswith("_")
    )


def _import_file(path: Path, module_name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


class PluginManager:
    """A pluggy manager for the ``feeld`` hooks."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FeeldHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local files from *local_dir*.

        Returns the names of every registered plugin afterwards.
        """
        installed = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._replace_classes_with_instances()
        local = self._load_local_dir(local_dir) if local_dir is not None else 0
        logger.debug("Loaded %d installed and %d local plugin(s)", installed, local)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register *plugin* under *name* (default: its class name)."""
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [
            self._pm.get_name(plugin) or type(plugin).__name__
            for plugin in self._pm.get_plugins()
        ]

    # Collaborators -------------------------------------------------------

    def evaluator(self) -> Evaluator | None:
        """The evaluator from the most recently registered plugin providing one."""
        return self._pm.hook.feeld_evaluator()

    def sanitizer(self) -> Sanitizer | None:
        """The sanitizer from the most recently registered plugin providing one."""
        return self._pm.hook.feeld_sanitizer()

    # Events --------------------------------------------------------------

    def notify_validated(
        self,
        form: str,
        field_count: int,
        errors: list[dict[str, Any]],
        warnings: list[str],
    ) -> None:
        """Call ``post_validate``. A raising plugin adds to *warnings* instead."""
        try:
            self._pm.hook.post_validate(form=form, field_count=field_count, errors=errors)
        except Exception:
            logger.debug("post_validate failed for form %s", form, exc_info=True)
            warnings.append(f"post_validate plugin hook failed for {form}")

    # Discovery -----------------------------------------------------------

    def _load_local_dir(self, local_dir: Path) -> int:
        if not local_dir.is_dir():
            return 0
        count = 0
        for path in sorted(local_dir.glob("*.py")):
            if not path.name.startswith("_"):
                count += self._load_local_file(path)
        return count

    def _load_local_file(self, path: Path) -> int:
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        try:
            module = _import_file(path, module_name)
        except Exception:
            logger.warning("Failed to load local plugin %s", path, exc_info=True)
            return 0

        count = 0
        if any(_is_hookimpl(obj) for _, obj in inspect.getmembers(module, inspect.isfunction)):
            self.register_plugin(module, name=module_name)
            count += 1
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ != module_name or not _declares_hooks(cls):
                continue
            try:
                instance = cls()
            except Exception:
                logger.warning(
                    "Failed to instantiate plugin class %s from %s",
                    cls.__name__,
                    path,
                    exc_info=True,
                )
                continue
            self.register_plugin(instance, name=f"{module_name}.{cls.__name__}")
            count += 1
        return count

    def _replace_classes_with_instances(self) -> None:
        """Hook methods on a registered class need an instance to be called."""
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not _declares_hooks(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                self._pm.register(plugin(), name=name)
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
