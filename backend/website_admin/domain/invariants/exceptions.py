class InvariantViolation(ValueError):
    """A domain rule about page content was broken."""


class IllegalTransition(ValueError):
    """A workflow action is not legal from the current state."""

    def __init__(self, message, *, action=None, state=None):
        super().__init__(message)
        self.action = action
        self.state = state


class StaleDraft(ValueError):
    """The client acted on a draft that has since been superseded."""


class PageNotFound(LookupError):
    pass
