"""Exception hierarchy shared by agents, the oracle and the data layer."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all gateway errors."""


class OracleError(GatewayError):
    """The LLM oracle failed to produce a usable answer."""


class OracleTimeoutError(OracleError):
    """The oracle did not answer within the configured timeout."""


class OracleSchemaError(OracleError):
    """The oracle answer could not be parsed or validated against the schema."""


class OracleTransportError(OracleError):
    """The provider request failed at the network/HTTP level."""


class OperationCancelled(GatewayError):
    """Raised when the cancellation token fires; never surfaced to the caller."""


class SurveyNotFoundError(GatewayError):
    """The requested survey does not exist in the data source."""

    def __init__(self, survey_id: str) -> None:
        super().__init__(f"Survey {survey_id} not found")
        self.survey_id = survey_id


class ProgressStateError(GatewayError):
    """A progress transition violated the reporter state machine."""


class UnknownAgentError(GatewayError):
    """No agent is registered under the requested mode."""


class RetrievalError(GatewayError):
    """The retrieval backend rejected or failed the request."""


class QueryExecutionError(GatewayError):
    """A generated SQL statement could not be executed."""


class ImageGenerationError(GatewayError):
    """The image backend failed to produce an image."""
