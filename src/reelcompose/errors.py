"""Exception types shared across reelcompose.

Validation errors subclass ValueError so callers that already catch
ValueError (the manifest loaders, the CLIs) keep working.
"""


class ReelValidationError(ValueError):
    """Input rejected before any state was touched."""


class EngineError(RuntimeError):
    """The transcoding engine exited non-zero for an instruction sequence."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.instruction = list(args)
        self.returncode = returncode
        self.stderr = stderr
        tail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"ffmpeg exited with status {returncode}: {tail}")


class PipelineError(RuntimeError):
    """A media pipeline job failed at a named stage.

    Raised only after the job's virtual files have been cleaned up.
    """

    def __init__(self, operation: str, stage: str, cause: Exception | None = None):
        self.operation = operation
        self.stage = stage
        self.cause = cause
        message = f"{operation} failed at stage '{stage}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class PipelineBusyError(PipelineError):
    """A job was started while another one still holds the engine."""

    def __init__(self, operation: str):
        super().__init__(operation, "acquire")
        self.args = (
            f"{operation} refused: another job is already running on this engine",
        )
