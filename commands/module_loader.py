"""
Module Loader
Loads command modules from source files and swaps them at runtime
"""

import asyncio
import importlib.machinery
import importlib.util
import inspect
import itertools
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Optional, Union

from commands.command_registry import Command, CommandDefinition, CommandRegistry
from commands.errors import BotError, LoadError
from utils.logger import LoggerMixin

# Module names are never registered in sys.modules, the counter keeps them distinct
_unit_ids = itertools.count(1)


class _SourceOnlyLoader(importlib.machinery.SourceFileLoader):
    """Always compiles from source, never from a cached .pyc."""

    def get_code(self, fullname):
        return self.source_to_code(self.get_data(self.path), self.path)


class ModuleLoader(LoggerMixin):
    """
    Cache of executable command units keyed by source location.

    A command module is a Python file that defines a ``COMMAND`` config dict
    and an ``async def run(ctx, args, level)`` body. It may also define a
    ``teardown()`` function, called when the module is unloaded.
    """

    def __init__(self, registry: CommandRegistry):
        super().__init__("ModuleLoader")
        self.registry = registry
        self._units: Dict[str, ModuleType] = {}
        self._reload_lock = asyncio.Lock()

    @staticmethod
    def _key(source_location: Union[str, Path]) -> str:
        return str(Path(source_location).resolve())

    def is_cached(self, source_location: Union[str, Path]) -> bool:
        return self._key(source_location) in self._units

    def _materialize(self, path: Path) -> ModuleType:
        """
        Execute the source file as a brand new module object.

        The loader skips the bytecode cache, so a stale .pyc can never
        shadow an edited file.
        """
        module_name = f"bot_command_{path.stem}_{next(_unit_ids)}"
        loader = _SourceOnlyLoader(module_name, str(path))
        spec = importlib.util.spec_from_file_location(module_name, path, loader=loader)
        if spec is None:
            raise LoadError("Not a Python module", str(path))

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise LoadError(f"{type(e).__name__}: {e}", str(path)) from e
        return module

    def _build_command(self, module: ModuleType, location: str) -> Command:
        config = getattr(module, "COMMAND", None)
        if not isinstance(config, dict):
            raise LoadError("Module does not define a COMMAND dict", location)

        run = getattr(module, "run", None)
        if run is None or not inspect.iscoroutinefunction(run):
            raise LoadError("Module does not define an async run(ctx, args, level)", location)

        try:
            definition = CommandDefinition.from_config(config)
        except (KeyError, ValueError, TypeError) as e:
            raise LoadError(f"Malformed COMMAND config: {e}", location) from e

        return Command(definition, run, source_location=location)

    def load(self, source_location: Union[str, Path], name: Optional[str] = None) -> Command:
        """
        Load a command module and register it.

        Args:
            source_location: Path of the module file
            name: Expected command name, checked against the module's config

        Returns:
            The registered command

        Raises:
            LoadError: Missing or malformed module, name mismatch, or a
                name/alias conflict reported by the registry
        """
        path = Path(source_location)
        location = self._key(path)

        if not path.is_file():
            raise LoadError("Source file not found", location)

        module = self._materialize(path)
        command = self._build_command(module, location)

        if name is not None and command.name != name.lower():
            raise LoadError(f"Module defines `{command.name}`, expected `{name.lower()}`", location)

        try:
            self.registry.register(command)
        except BotError as e:
            raise LoadError(str(e), location) from e

        self._units[location] = module
        self.debug(f"Loaded command: {command.name}")
        return command

    def unload(self, name: str) -> Command:
        """
        Release a command's module and remove it from the registry.

        Args:
            name: Command name or alias

        Returns:
            The removed command

        Raises:
            NotFoundError: No such command
            LoadError: The module's teardown failed; nothing was removed
        """
        command = self.registry.resolve(name)
        location = command.source_location
        module = self._units.get(location) if location else None

        teardown = getattr(module, "teardown", None) if module else None
        if callable(teardown):
            try:
                teardown()
            except Exception as e:
                raise LoadError(f"Teardown failed: {e}", location) from e

        if location:
            self._units.pop(location, None)
        self.registry.unregister(command.name)

        self.debug(f"Unloaded command: {command.name}")
        return command

    async def reload(self, name: str) -> Command:
        """
        Unload a command and load its module again from the same location.

        If unloading fails nothing changes. If loading fails after a
        successful unload the command stays absent.

        Args:
            name: Command name or alias

        Returns:
            The freshly loaded command

        Raises:
            NotFoundError, LoadError
        """
        async with self._reload_lock:
            command = self.registry.resolve(name)
            if not command.source_location:
                raise LoadError("Command was not loaded from a module", command.name)

            self.unload(command.name)
            try:
                fresh = self.load(command.source_location, command.name)
            except LoadError:
                self.warning(f"Reload of {command.name} failed, command is now unavailable")
                raise

        self.success(f"Reloaded command: {fresh.name}")
        return fresh

    def load_all(self, directory: Union[str, Path]) -> List[Command]:
        """
        Load every ``<category>/<name>.py`` module under ``directory``.

        Broken modules are logged and skipped.

        Returns:
            Commands loaded
        """
        root = Path(directory)
        loaded: List[Command] = []

        for path in sorted(root.glob("*/*.py")):
            if path.name.startswith("_"):
                continue
            try:
                loaded.append(self.load(path))
            except LoadError as e:
                self.error(f"Failed to load {path.name}: {e}")

        self.info(f"Loaded {len(loaded)} commands from {root}")
        return loaded
