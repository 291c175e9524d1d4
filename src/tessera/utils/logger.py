"""Logger namespacing for Tessera.

Every module logs under the ``tessera`` hierarchy so applications can
tune the tokenizer's output with one logger name. The package root gets
a NullHandler; nothing is printed unless the application configures
logging.

Example:
    >>> from tessera.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Compiled grammar %s", "source.osf")
"""

from __future__ import annotations

import logging

ROOT_LOGGER = "tessera"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the tessera namespace.

    Args:
        name: Logger name, usually the module's __name__

    Example:
        >>> get_logger("mymodule").name
        'tessera.mymodule'
    """
    if not (name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}.")):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
