from .text import (
    base64_decode,
    base64_encode,
    rot13_decode,
    rot13_encode,
    shift13_forward,
    to_base_n,
    unpack_tokens,
)

__all__ = [
    "base64_decode",
    "base64_encode",
    "rot13_decode",
    "rot13_encode",
    "shift13_forward",
    "to_base_n",
    "unpack_tokens",
]
