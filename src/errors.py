"""
Error taxonomy for the execution service.

Every failure raised while handling a run request is one of these. The
orchestrator catches them at the request boundary and turns them into a
text-mode result with the matching status code.
"""


class ExecutionError(Exception):
    """Base class for all run request failures."""

    status_code = 500
    category = "execution"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExecutionError):
    """Empty code or a language that cannot be run on the selected path."""

    status_code = 400
    category = "validation"


class CompileError(ExecutionError):
    """The compile step exited with a nonzero status."""

    category = "compile"


class RuntimeFailure(ExecutionError):
    """Nonzero run exit, timeout, or output cap exceeded."""

    category = "runtime"


class InfrastructureError(ExecutionError):
    """Host-side failure: unwritable temp root, missing toolchain."""

    category = "infrastructure"


class RemoteExecutionError(InfrastructureError):
    """The hosted execution API failed or rejected the request."""

    category = "remote"
