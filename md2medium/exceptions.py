"""
Custom exception classes for md2medium.
"""


class Md2MediumError(Exception):
    """Base exception for all md2medium errors."""
    pass


class ParseError(Md2MediumError):
    """Malformed front matter or an unusable note template.

    Attributes:
        section: Which input failed ('yaml', 'toml' or 'template')
    """

    def __init__(self, message, section=None):
        super().__init__(message)
        self.section = section


class TransformError(Md2MediumError):
    """The image resolver failed while rewriting the AST.

    The resolver's own exception is chained as ``__cause__``.

    Attributes:
        path: Original image destination that could not be resolved
    """

    def __init__(self, path, cause=None):
        message = f"Failed to resolve image '{path}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path


class RenderError(Md2MediumError):
    """Error during HTML serialization."""
    pass


class PublishError(Md2MediumError):
    """Error returned by the Medium API.

    Attributes:
        status_code: HTTP status code, or None when no response was received
    """

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class SecurityError(Md2MediumError):
    """Error related to input validation (size limits)."""
    pass
