from image_service.processing.engine import TransformationEngine
from image_service.processing.formats import FormatRegistry, FormatStrategy

__all__ = ["FormatRegistry", "FormatStrategy", "TransformationEngine"]
