"""
Parametric templates for centering and characterizing images.
"""
__title__ = "Templates"

from typing import Any, Dict, Type, Union

from vlbistats.object import get_object

from .template import Template
from .mring import MRing
from .disk import Disk
from .gaussian import DualGaussian

"""Available templates by name."""
TEMPLATES = {"mring": MRing, "disk": Disk, "gaussian": DualGaussian}


def get_template(kind: Union[str, Template, Type[Template], Dict[str, Any]], **kwargs: Any) -> Template:
    """Returns a template.

    Args:
        kind: One of "mring", "disk" and "gaussian", or a template, template class or config dict with a
            class key.
        **kwargs: Passed to template, e.g. order for rings.

    Returns:
        Template.

    Raises:
        ValueError: If template is unknown.
        TypeError: If kind does not describe a template.
    """
    if not isinstance(kind, str):
        return get_object(kind, Template, **kwargs)
    try:
        klass = TEMPLATES[kind.lower()]
    except KeyError:
        raise ValueError(f"Unknown template {kind}, choose one of {', '.join(TEMPLATES)}.")
    return klass(**kwargs)


__all__ = ["Template", "MRing", "Disk", "DualGaussian", "TEMPLATES", "get_template"]
