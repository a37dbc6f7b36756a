"""
Exception types shared across the moderation pipeline.

- RequestValidationFailure: raised by the validation gate, carries an error code
- InferenceError: raised when a model call fails at the provider
- InvalidResponseShape: raised when a model answered with unusable output
"""


class RequestValidationFailure(Exception):
    """A request body was rejected before orchestration."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class InferenceError(Exception):
    """
    A model invocation failed.

    The message always names the model so the error handler classifies it
    as an AI_ERROR.
    """

    def __init__(self, model_id: str, reason: str) -> None:
        super().__init__(f"AI model '{model_id}' failed: {reason}")
        self.model_id = model_id
        self.reason = reason


class InvalidResponseShape(ValueError):
    """A model response could not be decoded into a result record."""
