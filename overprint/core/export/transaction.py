"""
Remove/reimport bracket around an export.
"""
import logging
from typing import Callable, List, Optional, Sequence

from ..annotations.models import Annotation

logger = logging.getLogger(__name__)


class ExportTransaction:
    """
    Removes annotations from an engine and puts them back exactly once.

    Used as a context manager: records are deleted one by one as they are
    removed, and every record that was actually deleted is reimported on
    exit, whether the body finished or raised.
    """

    def __init__(self, engine, records: Sequence[Annotation],
                 on_restore: Optional[Callable[[], None]] = None):
        self.engine = engine
        self.records = list(records)
        self.removed: List[Annotation] = []
        self.composite_succeeded = False
        self._restored = False
        self._on_restore = on_restore

    def remove(self) -> None:
        for record in self.records:
            self.engine.delete_annotation(record.page_index, record.id)
            self.removed.append(record)

    def restore(self) -> None:
        if self._restored:
            return
        self._restored = True
        if self._on_restore is not None:
            self._on_restore()
        if not self.removed:
            return
        logger.debug("Reimporting %d annotations", len(self.removed))
        self.engine.import_annotations(list(self.removed))

    def _restore_after_failure(self) -> None:
        # The error that caused the failure wins over a failing reimport
        try:
            self.restore()
        except Exception as e:
            logger.error("Reimporting %d annotations failed: %s", len(self.removed), e)

    def __enter__(self) -> "ExportTransaction":
        try:
            self.remove()
        except BaseException:
            self._restore_after_failure()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self.restore()
        else:
            self._restore_after_failure()
        return False
