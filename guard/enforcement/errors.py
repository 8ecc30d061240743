"""Custom exception types for the tool enforcement pipeline."""


class PathRejectedError(Exception):
    """Raised when a path resolves outside the workspace or into a blocked location."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Path rejected {path!r}: {reason}")


class PolicyBlockedError(Exception):
    """Raised when code matches a dangerous-operation rule."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Blocked by dangerous-operation rule: {rule_id}")


class ConsoleError(Exception):
    """Raised when the console bridge rejects the code or returns non-2xx."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Console error {status_code}: {body}")


class ConsoleTimeoutError(Exception):
    """Raised when the console bridge call exceeds console_timeout_seconds."""
