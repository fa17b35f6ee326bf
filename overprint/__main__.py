"""
Export a PDF with its annotations from the command line.

    python -m overprint SOURCE.pdf ANNOTATIONS.json OUTPUT.pdf
"""
import asyncio
import logging
import sys

from .config import load_config
from .core.annotations.persistence import AnnotationPersistence
from .core.document.engine import PdfDocumentEngine
from .core.errors import OverprintError
from .core.export.orchestrator import ExportOrchestrator
from .core.fonts.directory import FontDirectory
from .core.fonts.source import FontconfigSource

logger = logging.getLogger("overprint")

USAGE = "usage: python -m overprint SOURCE.pdf ANNOTATIONS.json OUTPUT.pdf"


async def _export(fonts: FontDirectory, orchestrator: ExportOrchestrator,
                  document_id: str, annotations) -> bytes:
    names = {ann.font.postscript_name for ann in annotations if ann.uses_custom_font}
    if names and fonts.is_supported():
        await fonts.request_access()
        for name in sorted(names):
            if await fonts.load(name) is None:
                logger.warning("Font %s is not installed", name)
    return await orchestrator.export(document_id)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 3:
        print(USAGE, file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    source_pdf, annotations_path, output_pdf = args

    annotations, success = AnnotationPersistence().load_from_json(annotations_path, source_pdf)
    if not success:
        logger.error("Could not read annotations from %s", annotations_path)
        return 1

    config = load_config()
    try:
        engine = PdfDocumentEngine.from_file(source_pdf, annotations)
    except OSError as e:
        logger.error("Could not read %s: %s", source_pdf, e)
        return 1

    fonts = FontDirectory(FontconfigSource(), variant_marker=config.variant_marker)
    orchestrator = ExportOrchestrator({source_pdf: engine}, fonts, config=config)

    try:
        pdf_bytes = asyncio.run(_export(fonts, orchestrator, source_pdf, annotations))
    except OverprintError as e:
        logger.error("Export failed: %s", e)
        return 1

    with open(output_pdf, 'wb') as f:
        f.write(pdf_bytes)
    logger.info("Wrote %s", output_pdf)
    return 0


if __name__ == '__main__':
    sys.exit(main())
