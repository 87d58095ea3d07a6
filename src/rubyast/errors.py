from __future__ import annotations

from typing import Optional


class RubySyntaxError(SyntaxError):
    """Syntax error in the Ruby source, with the position Ripper reported."""

    def __init__(self, message: str, line: Optional[int] = None, filename: Optional[str] = None):
        self.message = message
        super().__init__(f"{message} at line {line}" if line is not None else message)
        self.lineno = line
        self.filename = filename


class InternalError(RuntimeError):
    """The raw tree broke an engine invariant; this is a defect, not bad input."""


class FrontendError(InternalError):
    """The Ruby interpreter running Ripper could not be started or failed."""

    def __init__(self, message: str, stderr: str = ""):
        self.message = message
        self.stderr = stderr
        detail = stderr.strip()
        super().__init__(f"{message}: {detail}" if detail else message)
