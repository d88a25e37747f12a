from .inspection_api_client import HttpInspectionApiClient

__all__ = ["HttpInspectionApiClient"]
