from .json_extract import (
    StructuredOutputError,
    extract_json_text,
    extract_structured,
    render_error_context,
    repair_json,
    strip_code_fences,
    validate_json,
)

__all__ = [
    "StructuredOutputError",
    "extract_json_text",
    "extract_structured",
    "render_error_context",
    "repair_json",
    "strip_code_fences",
    "validate_json",
]
