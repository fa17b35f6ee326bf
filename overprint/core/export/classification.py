from typing import Iterable, List, Tuple

from ..annotations.models import Annotation, AnnotationSubtype
from ..fonts.models import CustomFontRef

# The primary engine cannot reproduce exact stroke widths for these
_ALWAYS_CUSTOM = (
    AnnotationSubtype.UNDERLINE,
    AnnotationSubtype.STRIKEOUT,
    AnnotationSubtype.SQUIGGLY,
)

_ALWAYS_NATIVE = (
    AnnotationSubtype.HIGHLIGHT,
    AnnotationSubtype.INK,
    AnnotationSubtype.SQUARE,
    AnnotationSubtype.CIRCLE,
    AnnotationSubtype.LINE,
    AnnotationSubtype.STAMP,
)


def requires_custom_render(annotation: Annotation) -> bool:
    """Whether the overlay compositor must draw this annotation."""
    subtype = annotation.subtype
    if subtype == AnnotationSubtype.FREE_TEXT:
        return isinstance(annotation.font, CustomFontRef)
    if subtype in _ALWAYS_CUSTOM:
        return True
    if subtype in _ALWAYS_NATIVE:
        return False
    raise ValueError(f"Unclassified annotation subtype: {subtype}")


def classify(annotations: Iterable[Annotation]) -> Tuple[List[Annotation], List[Annotation]]:
    """
    Split annotations into (custom-render, native-render), keeping order.
    """
    custom: List[Annotation] = []
    native: List[Annotation] = []
    for annotation in annotations:
        if requires_custom_render(annotation):
            custom.append(annotation)
        else:
            native.append(annotation)
    return custom, native
