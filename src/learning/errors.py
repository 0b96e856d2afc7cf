"""
Errors raised by the learning engine.

Everything here is screen-local and recoverable: callers re-navigate or retry.
"""


class LearningError(Exception):
    """Base class for learning engine errors."""


class AnswerRequiredError(LearningError):
    """Advance was pressed before an option was selected."""

    def __init__(self, message: str = "Please select an answer before checking."):
        super().__init__(message)


class InvalidAnswerError(LearningError):
    """Selected option index does not exist on the current question."""


class InvalidTransitionError(LearningError):
    """Operation is not available on the current screen."""

    def __init__(self, operation: str, screen: str):
        self.operation = operation
        self.screen = screen
        super().__init__(f"Cannot {operation} from screen {screen}")


class ContentFetchError(LearningError):
    """Module or quiz content could not be fetched."""


class RewardError(LearningError):
    """The XP reward call failed. Never fatal to the quiz flow."""


class ChallengeNotFoundError(LearningError, KeyError):
    def __init__(self, challenge_id):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge {challenge_id} not found")

    def __str__(self) -> str:
        return self.args[0]


class UnknownModuleError(LearningError, KeyError):
    def __init__(self, module_id):
        self.module_id = module_id
        super().__init__(f"Module {module_id} not found")

    def __str__(self) -> str:
        return self.args[0]
