"""Exceptions used in the gCNV calling front-end"""


class GcnvException(Exception):
    """Base class for all errors that abort a run"""


class InvalidConfiguration(GcnvException):
    """Raised on invalid configuration or invalid combination of inputs"""


class DataConsistencyError(GcnvException):
    """Raised when an input file is unreadable or inconsistent with the other inputs"""

    def __init__(self, msg, path=None):
        super().__init__(msg)
        #: The offending file
        self.path = path


class EngineFailure(GcnvException):
    """Raised when the external inference engine reports failure"""

    def __init__(self, msg, result=None):
        super().__init__(msg)
        #: The ``EngineResult`` of the failed invocation
        self.result = result


class WorkDirectoryError(GcnvException):
    """Raised when the work directory or a temporary file in it cannot be written"""
