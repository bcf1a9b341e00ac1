from __future__ import annotations


class TagsmithError(Exception):
    pass


class PathError(TagsmithError, ValueError):
    pass


class PreconditionError(TagsmithError):
    """Raised before a batch touches any document."""


class NoTargetsError(PreconditionError):
    def __init__(self, message: str = "no_targets") -> None:
        super().__init__(message)


class EmptyTagListError(PreconditionError):
    pass


class ScopeRequiredError(PreconditionError):
    pass


class RootChangesNotAllowedError(PreconditionError):
    pass


class DocumentIOError(TagsmithError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FrontmatterSyntaxError(TagsmithError):
    def __init__(self, line_no: int, line: str, reason: str) -> None:
        super().__init__(f"line {line_no}: {reason}")
        self.line_no = line_no
        self.line = line
        self.reason = reason
