from .base import HttpProvider, RequestConfig
from .metno import MetNorwayProvider
from .nominatim import NominatimGeocoder

__all__ = ["HttpProvider", "RequestConfig", "MetNorwayProvider", "NominatimGeocoder"]
