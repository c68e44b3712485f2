"""Root of the deliberation engine's exception hierarchy."""


class GovernanceError(Exception):
    """Base class of every domain error.

    The API maps the whole family to problem-details responses, so new
    domain errors must derive from it (usually via DeliberationError).
    """

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
