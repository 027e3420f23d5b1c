class LoadTestError(Exception):
    """Base class for errors raised by the load-test scenarios."""


class SetupError(LoadTestError):
    """Raised when the run-wide setup (login, store prefetch) cannot complete.

    A setup failure is fatal for the whole run, not only the current user.
    """


class UnknownProfileError(LoadTestError, ValueError):
    def __init__(self, name, available):
        self.name = name
        self.available = list(available)
        super().__init__(
            f'Unknown TEST_TYPE: "{name}". Use one of: {", ".join(self.available)}'
        )
