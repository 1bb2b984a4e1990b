"""Loggers of the hydration engine.

Every engine component logs under the ``immutable_base`` namespace, so
an application can tune the whole library or a single component::

    >>> import logging
    >>> from immutable_base.logging import HYDRATOR, configure_logging
    >>> configure_logging(level=logging.DEBUG, components=(HYDRATOR,))

The library installs no handler by itself; records propagate to the
application's logging setup until :func:`configure_logging` is called.
"""

import logging
from typing import Iterable, Optional

ROOT_LOGGER = "immutable_base"

CONFIG = "config"
SCHEMA = "schema"
HYDRATOR = "hydrator"
UPDATER = "updater"
VALIDATION = "validation"

COMPONENTS = (CONFIG, SCHEMA, HYDRATOR, UPDATER, VALIDATION)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(component: str = "") -> logging.Logger:
    """Get the logger of an engine component, or the library root logger."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def configure_logging(
    level: int = logging.INFO,
    components: Optional[Iterable[str]] = None,
    format_string: str = DEFAULT_FORMAT,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Attach a handler to the library root logger and set levels.

    Args:
        level: Level applied to the root logger, or only to the named
            components when ``components`` is given.
        components: Component names to tune, e.g. ``(SCHEMA, UPDATER)``.
            Other components keep inheriting the root level.
        format_string: Format of the attached handler.
        handler: Handler to attach instead of a ``StreamHandler``.
            Nothing is attached when the root logger already has one.

    Returns:
        The library root logger.
    """
    root = get_logger()
    if components is None:
        root.setLevel(level)
    else:
        for component in components:
            get_logger(component).setLevel(level)

    if not root.handlers:
        handler = handler or logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format_string))
        root.addHandler(handler)
    return root
