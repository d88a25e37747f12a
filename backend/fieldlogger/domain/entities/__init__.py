from .inspection import Inspection, InspectionStatus

__all__ = [
    "Inspection",
    "InspectionStatus",
]
