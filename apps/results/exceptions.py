# results/exceptions.py


class ResultEngineError(Exception):
    """Base class for result engine failures"""


class NotConfigured(ResultEngineError):
    """No result setting applies; an administrator has to configure one first"""

    def __init__(self, message=None, academic_year=None):
        self.academic_year = academic_year
        super().__init__(message or 'Result setting is not configured')


class InvalidWeights(ResultEngineError):
    """Term weights violate the weighting rules (sum must be exactly the configured total)"""

    def __init__(self, message, total=None):
        self.total = total
        super().__init__(message)


class ResultGenerationError(ResultEngineError):
    """
    A final result batch failed and was rolled back.

    The triggering exception is chained as __cause__ and its message is
    included verbatim.
    """
