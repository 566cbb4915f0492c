"""Documentation comment resolution."""

from docplane.comments.parser import parse_comment
from docplane.comments.resolver import (
    get_comment,
    get_declaration_comment,
    get_file_comment,
    get_signature_comment,
)

__all__ = [
    "get_comment",
    "get_declaration_comment",
    "get_file_comment",
    "get_signature_comment",
    "parse_comment",
]
