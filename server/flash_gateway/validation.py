# Prompt validation. Only judges what the caller sent; per-route defaults are
# applied by the route handlers.


def validate_prompt(value: object) -> str | None:
    """Return the trimmed prompt, or None if it is missing, blank or not text."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None
