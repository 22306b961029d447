from __future__ import annotations

import importlib
import logging
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from deferref.exceptions import DeferRefBootstrapError
from deferref.registry import CollaboratorRegistry, registry as default_registry

logger = logging.getLogger(__name__)


class RegistrySettings(BaseSettings):
    """Environment configuration for production collaborator bindings.

    ``bindings`` maps locator keys to ``"module:attribute"`` import paths and is
    read from ``DEFERREF_BINDINGS`` as JSON, for example
    ``DEFERREF_BINDINGS='{"photos": "myapp.photos:PhotoService"}'``.
    """

    model_config = SettingsConfigDict(env_prefix="DEFERREF_", extra="ignore")

    bindings: dict[str, str] = Field(default_factory=dict)


def load_target(path: str) -> Any:
    """Import the object named by a ``"module:attribute"`` path.

    Dotted attribute chains after the colon are followed, so
    ``"myapp.services:container.photos"`` works too.

    Raises:
        DeferRefBootstrapError: If the path is malformed or cannot be imported.

    """
    module_name, sep, attribute_path = path.partition(":")
    if not sep or not module_name or not attribute_path:
        msg = f"Binding target {path!r} must look like 'package.module:attribute'."
        raise DeferRefBootstrapError(msg)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as error:
        msg = f"Cannot import module {module_name!r} for binding target {path!r}."
        raise DeferRefBootstrapError(msg) from error

    for attribute in attribute_path.split("."):
        try:
            target = getattr(target, attribute)
        except AttributeError as error:
            msg = f"Binding target {path!r} has no attribute {attribute!r}."
            raise DeferRefBootstrapError(msg) from error
    return target


def bootstrap_registry(
    registry: CollaboratorRegistry | None = None,
    settings: RegistrySettings | None = None,
) -> list[str]:
    """Bind every configured collaborator into ``registry``.

    Targets that are callable (classes and factory functions) are called with
    no arguments and the result is bound; any other object is bound as-is.

    Args:
        registry: Registry to populate. Defaults to the process-wide ``registry``.
        settings: Settings to read. Defaults to ``RegistrySettings()`` from the
            environment.

    Returns:
        The locator keys that were bound, in configuration order.

    Raises:
        DeferRefBootstrapError: If a target cannot be imported or its factory fails.

    """
    target_registry = registry if registry is not None else default_registry
    active_settings = settings if settings is not None else RegistrySettings()

    bound_keys: list[str] = []
    for locator_key, path in active_settings.bindings.items():
        target = load_target(path)
        if callable(target):
            try:
                collaborator = target()
            except Exception as error:
                msg = f"Collaborator factory {path!r} for {locator_key!r} failed: {error}"
                raise DeferRefBootstrapError(msg) from error
        else:
            collaborator = target
        target_registry.bind(locator_key, collaborator)
        bound_keys.append(locator_key)

    logger.info("Bootstrapped %d collaborator binding(s): %s", len(bound_keys), bound_keys)
    return bound_keys
