"""Exception types shared across the scout pipeline."""


class ScoutError(Exception):
    """Base class for all scout errors."""


class ConfigError(ScoutError):
    """Missing or invalid runtime configuration (e.g. no API key)."""


class InputValidationError(ScoutError, ValueError):
    """A job submission was rejected before any work started."""


class NoScreenshotsError(ScoutError):
    """A crawl result had no usable screenshots to send to the model."""


class LLMResponseError(ScoutError):
    """The model returned no content at all."""


class JobNotFoundError(ScoutError):
    """No job is registered under the given id."""


class InvalidTransitionError(ScoutError):
    """A job status change would violate the job state machine."""
