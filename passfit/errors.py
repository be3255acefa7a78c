"""
Exceptions shared by the geometry engine and the model adapters
"""


class PassfitError(Exception):
    """Base class for all passfit errors"""
    pass


class InvalidArgument(PassfitError, ValueError):
    """Non-positive dimensions, bad DPI, malformed face box or unknown id"""
    pass


class DegenerateGeometry(PassfitError, ValueError):
    """Geometry that cannot produce a finite transform (e.g. zero face height)"""
    pass


class NoSubjectDetected(PassfitError):
    """Detector or segmenter returned nothing usable"""
    pass


class ModelUnavailable(PassfitError, RuntimeError):
    """Inference backend failed to initialize or raised during inference"""
    pass
