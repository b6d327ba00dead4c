"""Custom exception hierarchy for the tinyscad engine."""

from __future__ import annotations


class TinyScadError(Exception):
    """Base exception for all tinyscad errors."""


class _Positioned(TinyScadError):
    """Error tied to a line/column in template source."""

    def __init__(self, message: str, line: int, column: int) -> None:
        self.line = line
        self.column = column
        super().__init__(f"{message} (line {line}, col {column})")


# --- Tokenizer ---


class LexError(_Positioned):
    """Raised when source text cannot be split into tokens."""


class InvalidToken(LexError):
    def __init__(self, char: str, line: int, column: int) -> None:
        self.char = char
        super().__init__(f"Invalid token {char!r}", line, column)


class UnterminatedComment(LexError):
    def __init__(self, line: int, column: int) -> None:
        super().__init__("Unterminated block comment", line, column)


# --- Parser ---


class ParseError(_Positioned):
    """Raised when the token stream does not match the grammar."""


class UnexpectedToken(ParseError):
    def __init__(self, found: str, line: int, column: int) -> None:
        self.found = found
        super().__init__(f"Unexpected token: {found}", line, column)


class ExpectedSymbol(ParseError):
    def __init__(self, expected: str | None, found: str, line: int, column: int) -> None:
        self.expected = expected
        self.found = found
        what = f"symbol {expected!r}" if expected else "a symbol"
        super().__init__(f"Expected {what}, found {found!r}", line, column)


class ExpectedIdentifier(ParseError):
    def __init__(self, expected: str | None, found: str, line: int, column: int) -> None:
        self.expected = expected
        self.found = found
        what = repr(expected) if expected else "an identifier"
        super().__init__(f"Expected {what}, found {found!r}", line, column)


class UnterminatedBlock(ParseError):
    def __init__(self, line: int, column: int) -> None:
        super().__init__("Unterminated block. Missing '}'", line, column)


# --- Metadata ---


class MetadataError(TinyScadError):
    """Raised when a metadata directive is malformed."""


class InvalidParamDirective(MetadataError):
    def __init__(self, line_text: str) -> None:
        self.line_text = line_text
        super().__init__(f"Invalid @param metadata: {line_text}")


# --- Evaluator ---


class EvalError(TinyScadError):
    """Raised when a parsed program cannot be evaluated."""


class UndefinedVariable(EvalError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Undefined variable: {name}")


class NotANumber(EvalError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Expected a number, received: {value!r}")


class DivisionByZero(EvalError):
    def __init__(self) -> None:
        super().__init__("Division by zero")


class DivergentLoopStep(EvalError):
    def __init__(self) -> None:
        super().__init__("For-loop step cannot be 0")


class UnsupportedCall(EvalError):
    def __init__(self, name: str, line: int | None = None, column: int | None = None) -> None:
        self.name = name
        message = f"Unsupported call: {name}"
        if line is not None:
            message += f" (line {line}, col {column})"
        super().__init__(message)


class MissingArgument(EvalError):
    def __init__(self, call_name: str, argument: str) -> None:
        self.call_name = call_name
        self.argument = argument
        super().__init__(f"{call_name} requires {argument}")


class InvalidVectorArity(EvalError):
    def __init__(self, expected: int, value: object) -> None:
        self.expected = expected
        self.value = value
        super().__init__(f"Expected a {expected}-item vector, received: {value!r}")


class LoopBudgetExceeded(EvalError):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"For-loop exceeded the iteration budget of {limit}")


# --- Tooling ---


class ConfigError(TinyScadError):
    """Raised when an engine configuration file cannot be loaded."""


class TemplateError(TinyScadError):
    """Raised when a template cannot be read or rendered with the given params."""
