def extension_of(filename: str) -> str:
    """
    Returns the part of a filename after its last '.'.

    No dot at all, or a dot as the final character, yields an empty string.
    Only the last dot counts: "a.tar.gz" gives "gz". The comparison value is
    returned exactly as written (no case-folding, no leading dot).

    Args:
        filename: Any string, including the empty string.

    Returns:
        The extension substring, possibly empty.
    """
    dot_index = filename.rfind(".")
    if dot_index < 0:
        return ""
    return filename[dot_index + 1 :]
