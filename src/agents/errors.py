"""
Error taxonomy for the department router.

``ClassificationError`` and ``GenerationError`` abort a ``route`` call;
the router never catches them and never returns a partial result.
Unknown or duplicate intents are not errors: they are skipped.
"""


class AgentSystemError(Exception):
    """Base class for routing-system failures."""


class ClassificationError(AgentSystemError):
    """The classifier could not produce a structurally valid result."""


class GenerationError(AgentSystemError):
    """A department agent could not produce a structurally valid result."""


class ConfigurationError(AgentSystemError):
    """The router was wired with an invalid agent map."""


class EvaluationError(AgentSystemError):
    """The answer evaluator could not produce a valid score."""
