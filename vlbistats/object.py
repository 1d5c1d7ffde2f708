"""
Helpers for building objects from configuration, so that e.g. a divergence or a template can be given in a
YAML file either as a dotted class name or as a dict with a ``class`` key:

    - :func:`~vlbistats.object.create_object` builds an object from a dict.
    - :func:`~vlbistats.object.get_object` accepts a dict, a class or an instance and optionally checks the type.
    - :func:`~vlbistats.object.get_class` resolves a class given directly, as dotted string or as dict.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from abc import ABCMeta
from typing import Any, TypeVar

log = logging.getLogger(__name__)


"""Type of object to build."""
T = TypeVar("T")


def get_object(
    source: dict[str, Any] | T | type[T],
    expected: type[T] | ABCMeta | None = None,
    **kwargs: Any,
) -> T | Any:
    """Returns an object built from a dict or a class, or the given instance itself.

    Args:
        source: Dict with a class key and constructor arguments, a class, or an existing object.
        expected: If given, the result must be an instance of this class.
        **kwargs: Extra constructor arguments, override entries in a dict.

    Returns:
        The object.

    Raises:
        TypeError: If nothing is given or the result has the wrong type.
    """

    if source is None:
        raise TypeError("Neither configuration nor object given.")

    if isinstance(source, dict):
        obj = create_object({**source, **kwargs})
    elif inspect.isclass(source):
        obj = source(**kwargs)
    else:
        obj = source

    # type check
    if expected is not None and not isinstance(obj, expected):
        raise TypeError(f"Object of type {type(obj).__name__} is not a {expected.__name__}.")
    return obj


def get_class_from_string(class_name: str) -> Any:
    """Imports a class given by its dotted path.

    Args:
        class_name: Dotted path, e.g. "vlbistats.divergences.NxCorr".

    Returns:
        The class.
    """

    module_name, _, name = class_name.rpartition(".")
    if module_name == "":
        raise ValueError(f"Class name {class_name} is not a dotted path.")
    module = importlib.import_module(module_name)
    return getattr(module, name)


def get_class(class_or_name: str | type | dict[str, Any], base: type | None = None) -> type:
    """Resolves a class given directly, as a dotted string, or as a dict with a class key.

    Args:
        class_or_name: Class, dotted class name or config dict.
        base: If given, the class must be a subclass of it.

    Returns:
        The class.
    """
    if isinstance(class_or_name, dict):
        class_or_name = class_or_name["class"]
    klass = get_class_from_string(class_or_name) if isinstance(class_or_name, str) else class_or_name
    if not inspect.isclass(klass):
        raise TypeError(f"{class_or_name} is not a class.")
    if base is not None and not issubclass(klass, base):
        raise TypeError(f"{klass.__name__} is not a subclass of {base.__name__}.")
    return klass


def create_object(config: dict[str, Any], *args: Any, **kwargs: Any) -> Any:
    """Builds an object from a dict with a class key, all other entries are passed to the constructor.

    Args:
        config: Configuration with class key.
        *args: Positional constructor arguments.
        **kwargs: Further keyword constructor arguments.

    Returns:
        The new object.
    """
    options = dict(config)
    klass = get_class_from_string(options.pop("class"))
    log.debug("Creating %s...", klass.__name__)
    return klass(*args, **options, **kwargs)


__all__ = ["get_object", "get_class", "get_class_from_string", "create_object"]
