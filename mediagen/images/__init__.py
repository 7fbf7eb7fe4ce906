from .reference import (
    base64_to_data_url,
    normalize_reference_image,
    sniff_image_mime,
)

__all__ = [
    "base64_to_data_url",
    "normalize_reference_image",
    "sniff_image_mime",
]
