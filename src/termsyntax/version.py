"""Centralized package information for termsyntax."""

__all__ = ["PACKAGE_NAME", "PACKAGE_VERSION"]

PACKAGE_NAME = "termsyntax"

try:
    from importlib.metadata import PackageNotFoundError, version

    PACKAGE_VERSION = version(PACKAGE_NAME)
except PackageNotFoundError:
    PACKAGE_VERSION = "unknown"
