class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class RenderError(AppError):
    pass


class SubmissionError(AppError):
    def __init__(self, message: str, unreachable: bool = False):
        super().__init__(message)
        self.unreachable = unreachable
