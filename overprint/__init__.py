"""
Overprint: faithful export of annotated PDFs.

Annotations the primary engine cannot render exactly (free text in local
fonts, text markup with precise stroke widths) are drawn onto its base
export with PyMuPDF, using fonts discovered on the local machine.
"""
from .config import ExportConfig, load_config

__version__ = "0.1.0"

__all__ = ["ExportConfig", "load_config", "__version__"]
