"""Module host interface: explicit registration of HTTP modules and settings deployment.

A host application creates a ModuleContext, registers modules by name and calls load_all(). Each module
declares the settings sections it handles, and deploy_settings() dispatches a JSON settings document to them.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import orjson

from pyhttpmod.connection import Connection, ConnectionSettings, Transport
from pyhttpmod.exceptions import InvalidArgumentError
from pyhttpmod.http.cookie import CookieStore

logger = logging.getLogger("pyhttpmod.module")

SettingsCallback = Callable[[Mapping[str, Any]], None]
SETTINGS_SECTION = "http"


class HttpModule:
    """HTTP module creating connections which share settings and a cookie store."""

    def __init__(self, cookie_store: CookieStore | None = None) -> None:
        """Create the module. A new CookieStore is used unless one is given."""
        self.cookie_store = cookie_store if cookie_store is not None else CookieStore()
        self.settings = ConnectionSettings()
        self.initialized = False

    def init(self) -> None:
        """Initialize the module. Called once by ModuleContext.load_all()."""
        self.initialized = True

    def register_settings(self) -> dict[str, SettingsCallback]:
        """Return the settings sections handled by this module with their callbacks."""
        return {SETTINGS_SECTION: self.apply_settings}

    def apply_settings(self, section: Mapping[str, Any]) -> None:
        """Validate and apply the ``"http"`` settings section, merged over the current settings."""
        merged = {**self.settings.model_dump(exclude_unset=True), **section}
        self.settings = ConnectionSettings.load(merged)
        logger.debug("Applied HTTP settings: %s", sorted(section))

    def new_connection(self, transport: Transport) -> Connection:
        """Create a connection using the module settings and cookie store."""
        return Connection(transport, cookie_provider=self.cookie_store, settings=self.settings)


class ModuleContext:
    """Registry of loaded modules and their settings callbacks, passed explicitly to the host."""

    def __init__(self) -> None:
        self._modules: dict[str, HttpModule] = {}
        self._loaded_callbacks: dict[str, list[Callable[[HttpModule], None]]] = {}
        self._all_loaded_callbacks: list[Callable[[], None]] = []
        self._settings_callbacks: dict[str, list[SettingsCallback]] = {}
        self._loaded = False

    def register(self, name: str, module: HttpModule) -> None:
        """Register a module under a unique name."""
        if not name:
            raise InvalidArgumentError("module name must not be empty")
        if name in self._modules:
            raise InvalidArgumentError(f"module {name!r} is already registered", {"name": name})
        self._modules[name] = module

    def get(self, name: str) -> HttpModule:
        """Return a registered module."""
        try:
            return self._modules[name]
        except KeyError:
            raise InvalidArgumentError(f"module {name!r} is not registered", {"name": name}) from None

    def on_loaded(self, name: str, callback: Callable[[HttpModule], None]) -> None:
        """Call callback with the module once it has been loaded."""
        self._loaded_callbacks.setdefault(name, []).append(callback)

    def on_all_loaded(self, callback: Callable[[], None]) -> None:
        """Call callback once all modules have been loaded."""
        self._all_loaded_callbacks.append(callback)

    def load_all(self) -> None:
        """Initialize all registered modules, collect their settings callbacks and fire the load callbacks."""
        if self._loaded:
            raise InvalidArgumentError("modules are already loaded")
        self._loaded = True

        for name, module in self._modules.items():
            module.init()
            for section, callback in module.register_settings().items():
                self._settings_callbacks.setdefault(section, []).append(callback)
            logger.debug("Loaded module %r", name)
            for loaded_callback in self._loaded_callbacks.get(name, []):
                loaded_callback(module)

        for all_loaded_callback in self._all_loaded_callbacks:
            all_loaded_callback()

    def deploy_settings(self, document: Mapping[str, Any] | bytes | str | Path) -> None:
        """Dispatch each top-level section of a settings document to the callbacks registered for it.

        The document is a mapping, JSON text or a path to a JSON file.
        """
        if isinstance(document, Path):
            document = document.read_bytes()
        if isinstance(document, bytes | str):
            try:
                document = orjson.loads(document)
            except orjson.JSONDecodeError as e:
                raise InvalidArgumentError(f"Invalid settings document: {e}") from e
        if not isinstance(document, Mapping):
            raise InvalidArgumentError("settings document must be a JSON object")

        for section, value in document.items():
            callbacks = self._settings_callbacks.get(section)
            if not callbacks:
                logger.debug("No module handles settings section %r", section)
                continue
            if not isinstance(value, Mapping):
                raise InvalidArgumentError(f"settings section {section!r} must be an object", {"section": section})
            for callback in callbacks:
                callback(value)
