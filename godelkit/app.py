"""Application identity: name and version string."""

APP_NAME = "godel"

VERSION = "unspecified"


def version_output() -> str:
    """Return the line printed for the version request."""
    return f"{APP_NAME} version {VERSION}"