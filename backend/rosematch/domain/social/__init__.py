"""Social domain exports."""

from . import notifications  # noqa: F401
