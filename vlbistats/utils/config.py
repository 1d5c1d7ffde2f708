import os
import re
from io import StringIO
from typing import Any, Dict, Optional

import yaml

"""Include statement, optionally as list item, with file name and an optional dotted key."""
INCLUDE = re.compile(r"((\s*)?(-\s*)?\{include (\S*)( \S*)?\})")


def pre_process_yaml(config: str) -> str:
    """Resolves statements of the form {include <file.yaml> <key>} in a YAML file.

    This way several configurations can share e.g. a grid definition. Included files are resolved relative to
    the including file and may contain includes themselves.

    Args:
        config: Path of YAML file.

    Returns:
        Content of file with all includes replaced.
    """
    directory = os.path.dirname(os.path.abspath(config))
    with open(config, "r") as f:
        content = f.read()

    for statement, indent, dash, filename, key in INCLUDE.findall(content):
        with StringIO(pre_process_yaml(os.path.join(directory, filename))) as f:
            part = include_parts(yaml.safe_load(f), key)
        text = yaml.dump(part, default_flow_style=False, indent=2)

        # keep indentation of the include statement
        if dash != "":
            text = dash + text
        if indent != "":
            text = indent + text.rstrip("\n").replace("\n", indent + " " * len(dash))
        content = content.replace(statement, text)

    return content


def include_parts(include: Dict[str, Any], keys: Optional[str]) -> Any:
    """Picks a nested part of an included configuration.

    Args:
        include: Included configuration.
        keys: Dotted path into the configuration, e.g. "grids.summary", or empty for all of it.

    Returns:
        Requested part.
    """
    if keys is None or keys.strip() == "":
        return include
    for key in keys.strip().split("."):
        include = include[key]
    return include


def load_config(config: str, section: Optional[str] = None) -> Dict[str, Any]:
    """Loads a YAML configuration file.

    Args:
        config: Path of the config file.
        section: If given, only return this top-level section.

    Returns:
        Configuration dictionary, empty if the file (or the section) is empty.
    """
    with StringIO(pre_process_yaml(config)) as f:
        cfg = yaml.safe_load(f)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Configuration in {config} is not a mapping.")
    if section is not None:
        return dict(cfg.get(section) or {})
    return cfg


__all__ = ["pre_process_yaml", "include_parts", "load_config"]
