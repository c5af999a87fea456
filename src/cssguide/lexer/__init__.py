from cssguide.lexer.errors import LexError, UnterminatedCommentError, UnterminatedStringError
from cssguide.lexer.tokenizer import Tokenizer, tokenize

__all__ = [
    "LexError",
    "Tokenizer",
    "UnterminatedCommentError",
    "UnterminatedStringError",
    "tokenize",
]
