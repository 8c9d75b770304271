PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def png_bytes(size: int = 2048) -> bytes:
    return PNG_HEADER + b"\x00" * (size - len(PNG_HEADER))
