from __future__ import annotations

__version__ = "0.1.0"

from .exceptions import (
    NeurioConnectionError,
    NeurioError,
    NeurioFetchError,
    NeurioInvalidParametersError,
    NeurioMissingCredentialsError,
    NeurioMissingParametersError,
    NeurioNotConnectedError,
)
from .neurio import BASE_URL, GRANULARITIES, Neurio

__all__ = [
    "BASE_URL",
    "GRANULARITIES",
    "Neurio",
    "NeurioConnectionError",
    "NeurioError",
    "NeurioFetchError",
    "NeurioInvalidParametersError",
    "NeurioMissingCredentialsError",
    "NeurioMissingParametersError",
    "NeurioNotConnectedError",
]
