"""Shared exceptions for the shopfloor engine."""


class ConfigError(Exception):
    """Raised when plant configuration is invalid or missing."""

    def __init__(self, message: str, suggestion: str = ""):
        self.message = message
        self.suggestion = suggestion
        full = message
        if suggestion:
            full += f"\n  Try: {suggestion}"
        super().__init__(full)


class NotFound(Exception):
    """Raised when an entity id does not resolve."""

    entity = "Entity"
    default_suggestion = ""

    def __init__(self, entity_id: str, suggestion: str = ""):
        self.entity_id = entity_id
        self.suggestion = suggestion or self.default_suggestion
        msg = f"{self.entity} with ID {entity_id} not found"
        if self.suggestion:
            msg += f"\n  Try: {self.suggestion}"
        super().__init__(msg)


class WorkerNotFound(NotFound):
    entity = "Worker"
    default_suggestion = "Run 'floor workers' to see known worker ids."


class TaskNotFound(NotFound):
    entity = "Task"
    default_suggestion = "Load the task first with 'floor load <file>'."


class ValidationError(Exception):
    """Raised when input fails validation."""

    def __init__(self, message: str, suggestion: str = ""):
        self.message = message
        self.suggestion = suggestion
        full = message
        if suggestion:
            full += f"\n  Try: {suggestion}"
        super().__init__(full)


class StaleWorkerError(Exception):
    """Raised when a worker save races with another writer."""

    def __init__(self, worker_id: str, expected: int, found: int):
        self.worker_id = worker_id
        self.expected = expected
        self.found = found
        self.suggestion = "Reload the worker and apply the change again."
        msg = (f"Worker '{worker_id}' was modified concurrently "
               f"(expected version {expected}, stored version {found})")
        msg += f"\n  Try: {self.suggestion}"
        super().__init__(msg)
