"""Helper modules for the Innoprint storefront."""

__all__ = [
    "addresses",
    "catalog",
    "checkout",
    "pricing",
    "print_options",
    "uploads",
]
