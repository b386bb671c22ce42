from typing import Optional, Union


class AuditError(Exception):
    """Base class for audit failures. ``code`` is a short machine-readable tag."""
    code: Optional[Union[str, int]] = None

    def __init__(self, message: str, code: Optional[Union[str, int]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class InputError(AuditError):
    """No usable HTML or URL was supplied."""
    code = "empty_input"


class FetchError(AuditError):
    """The URL could not be retrieved (network error, non-2xx status, empty body)."""
    code = "fetch_failed"


class RuleError(AuditError):
    """A single rule raised during evaluation. Recorded as a failing check."""
    code = "rule_failed"

    def __init__(self, rule_id: str, cause: BaseException):
        super().__init__(f"Rule '{rule_id}' failed internally: {type(cause).__name__}: {cause}")
        self.rule_id = rule_id
        self.cause = cause


class EvaluatorError(AuditError):
    """The structured evaluator could not build a document. Triggers the pattern fallback."""
    code = "evaluator_failed"


class PersistenceError(AuditError):
    """The report store could not write a report."""
    code = "persistence_failed"
