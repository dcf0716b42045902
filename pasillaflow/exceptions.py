"""
Exception hierarchy for PasillaFlow

Every error raised by the pipeline derives from PasillaFlowError. Errors are
fatal: the pipeline stops at the first one and nothing is retried.
"""


class PasillaFlowError(Exception):
    """Base class for all PasillaFlow errors"""


class SchemaError(PasillaFlowError):
    """Malformed or mismatched count matrix / sample design table"""


class FitError(PasillaFlowError):
    """The statistics backend failed or the input is degenerate"""

    def __init__(self, message: str, stage: str = None):
        self.stage = stage
        if stage:
            message = f"{stage}: {message}"
        super().__init__(message)


class ExportError(PasillaFlowError):
    """An output artifact could not be written"""


class ConfigError(PasillaFlowError):
    """Invalid configuration file or value"""
