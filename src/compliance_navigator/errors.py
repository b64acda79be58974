"""Exception types raised by the navigator SDK.

Every error subclasses a built-in so callers that only know about
``KeyError`` / ``ValueError`` (e.g. the REST layer's global handlers) keep
working:

  - QuestionNotFound  - identifier absent from the tree (recoverable: the
    engine routes to the terminal state)
  - TreeLoadError     - tree document missing or malformed (fatal at startup)
  - ProgressCorrupt   - saved progress fails to parse (recoverable: start a
    fresh assessment and surface a notice)
  - InvalidAnswer     - answer does not fit the question
"""


class QuestionNotFound(KeyError):
    """Raised when a question identifier does not exist in the tree."""

    def __init__(self, qid: str) -> None:
        super().__init__(qid)
        self.qid = qid

    def __str__(self) -> str:
        return f"Question not found: {self.qid}"


class TreeLoadError(ValueError):
    """Raised when the decision tree document is missing or malformed."""


class ProgressCorrupt(ValueError):
    """Raised when saved progress cannot be parsed back into a session."""


class InvalidAnswer(ValueError):
    """Raised when an answer is not valid for the question it targets."""
