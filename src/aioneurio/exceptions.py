"""Exceptions for Neurio API client."""


class NeurioError(Exception):
    """Base exception for Neurio API errors."""


class NeurioMissingCredentialsError(NeurioError, ValueError):
    """Exception raised when key, secret or sensor ID is missing."""


class NeurioMissingParametersError(NeurioError, ValueError):
    """Exception raised when a required query parameter is missing."""


class NeurioInvalidParametersError(NeurioError, ValueError):
    """Exception raised when a query parameter has an invalid value."""


class NeurioConnectionError(NeurioError):
    """Exception raised when the access token request fails."""


class NeurioFetchError(NeurioError):
    """Exception raised when a data request fails or cannot be decoded."""


class NeurioNotConnectedError(NeurioFetchError):
    """Exception raised when fetching data before connect() has succeeded."""
