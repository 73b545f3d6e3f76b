"""Ownership marker for generated barrel files."""

HEADER_LINE = "// @generated by barrelkeep. Do not edit.\n"


def is_owned(content: str) -> bool:
    """A file is ours only if it starts with the exact header line."""
    return content.startswith(HEADER_LINE)
