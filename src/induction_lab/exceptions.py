class StateTransitionError(Exception):
    """Lab controller asked to do something its current state does not allow."""
    def __init__(self, message="Invalid lab state transition attempted."):
        super().__init__(message)


class UnsupportedExportFormatError(Exception):
    """Requested export format has no registered strategy."""
    def __init__(self, message="Export format not supported."):
        super().__init__(message)


class EmptyExportError(Exception):
    """Export needs at least one recorded measurement."""
    def __init__(self, message="No measurements to export."):
        super().__init__(message)
