class HsvSegmentationError(Exception):
    def __init__(self, code: str, message: str, context: str = ""):
        super().__init__(message)
        self.code = code
        self.context = context


class ConfigurationError(HsvSegmentationError):
    """Invalid or unresolvable run configuration; raised before any cloud is touched."""

    def __init__(self, message: str, context: str = "", code: str = "CONFIG_INVALID"):
        super().__init__(code, message, context=context)


class DegenerateNeighborhood(HsvSegmentationError):
    """A radius query returned no points, so the average colour is undefined."""

    def __init__(self, message: str, context: str = ""):
        super().__init__("DEGENERATE_NEIGHBORHOOD", message, context=context)


class Cancelled(HsvSegmentationError):
    """The progress channel asked to stop the run."""

    def __init__(self, message: str = "Run cancelled", context: str = ""):
        super().__init__("CANCELLED", message, context=context)
        # per-cloud outcomes known when the run stopped, filled by the use case
        self.outcomes: list = []
