"""Display helpers for photo listings."""

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    """Format a byte count using base-1024 units, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit_index]}"


def format_photo_count(count: int) -> str:
    """Return a pluralised photo count."""
    return f"{count} photo" if count == 1 else f"{count} photos"
