"""Domain exceptions mapped to HTTP responses in ``soil_health.main``."""


class RecommendationValidationError(Exception):
    """Required user input for a recommendation is missing."""

    def __init__(self, message: str = "Crop selection is required"):
        super().__init__(message)
        self.message = message


class DatastoreUnavailable(Exception):
    """The soil datastore could not be read."""
