from __future__ import annotations


class TesterError(RuntimeError):
    pass


class NotTestingError(TesterError):
    def __init__(self) -> None:
        super().__init__(
            "Not testing.  You must declare output with a test function first."
        )


class EpisodeActiveError(TesterError):
    pass


class PlanError(TesterError):
    pass
