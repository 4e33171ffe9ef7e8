"""Small helpers shared across the package."""

_CHARACTERS_TO_ESCAPE = frozenset(".*+?()[]{}^$|\\")


def get_url_as_regex_string(url: str) -> str:
    """Return an anchored regular expression that matches ``url`` exactly."""
    escaped = "".join("\\" + char if char in _CHARACTERS_TO_ESCAPE else char for char in url)
    return f"^{escaped}$"