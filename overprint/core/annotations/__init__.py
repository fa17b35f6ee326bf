"""
Annotation records and the live annotation set.
"""
from .manager import AnnotationManager
from .models import Annotation, AnnotationSubtype, Rect
from .persistence import AnnotationPersistence

__all__ = [
    'Annotation',
    'AnnotationSubtype',
    'Rect',
    'AnnotationManager',
    'AnnotationPersistence',
]
