from .inspection import InspectionModel

__all__ = [
    "InspectionModel",
]
