from cssguide.parser.errors import StructuralParseError
from cssguide.parser.parser import parse_document

__all__ = ["StructuralParseError", "parse_document"]
