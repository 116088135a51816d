class ReportAgentError(Exception):
    """Base class for every failure raised by the reporting core."""


class RemoteAPIError(ReportAgentError):
    """The Trello API answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GenerationError(ReportAgentError):
    """The text-generation backend failed or returned nothing usable."""


class StorageError(ReportAgentError):
    """Reading or writing the report directory failed."""


class NotFoundError(ReportAgentError):
    """No stored report matches the requested id."""


class ConfigurationError(ReportAgentError):
    """The agent or one of its backends cannot be set up."""


class AgentStateError(ReportAgentError):
    """start() on a running agent, or stop() on a stopped one."""
