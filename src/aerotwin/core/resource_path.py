"""Resource path resolution for the configuration files shipped with the package.

The default aircraft wiring and logging configuration live in
``aerotwin/config/`` next to the code, so they resolve the same way from a
source checkout and from an installed wheel.

Typical usage:
    from aerotwin.core.resource_path import get_config_path

    wiring = get_config_path("aircraft/e170.yaml")
"""

from pathlib import Path


def get_package_root() -> Path:
    """Get the installed ``aerotwin`` package directory.

    Returns:
        Path to the directory holding ``core/``, ``systems/`` and ``config/``.
    """
    # aerotwin/core -> aerotwin
    return Path(__file__).resolve().parent.parent


def get_resource_path(relative_path: str) -> Path:
    """Get absolute path to a resource file or directory.

    Args:
        relative_path: Relative path from the package root (e.g., "config/logging.yaml").

    Returns:
        Absolute path to the resource.
    """
    return get_package_root() / relative_path


def get_config_path(config_file: str) -> Path:
    """Get path to a configuration file.

    Args:
        config_file: Config filename or relative path (e.g., "logging.yaml" or
            "aircraft/e170.yaml").

    Returns:
        Absolute path to the config file.

    Examples:
        >>> get_config_path("aircraft/e170.yaml").name
        'e170.yaml'
    """
    return get_resource_path(f"config/{config_file}")
