from .parser import detect_garment_type, extract_size_labels, is_size_guide, reconstruct
from .text import normalize_ocr_text

__all__ = [
    "detect_garment_type",
    "extract_size_labels",
    "is_size_guide",
    "normalize_ocr_text",
    "reconstruct",
]
