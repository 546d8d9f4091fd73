"""Project-level exception hierarchy."""


class KumaoError(Exception):
    """Base for all kumao-bot exceptions."""


class ConfigError(KumaoError):
    """Configuration is missing or invalid."""


class LineApiError(KumaoError):
    """A LINE Messaging API call failed."""


class TutorError(KumaoError):
    """The tutor model could not produce an answer."""


class BoardRenderError(KumaoError):
    """Rendering a formula to a board image failed."""


class WebhookError(KumaoError):
    """Webhook server or dispatch failed."""
