"""Core module - storage, models and observability for the document core.

This module contains the shared data models, the PDF artifact store, the
snapshot persistence port and the logging utilities. Domain logic lives in
/documents/, /tax_engine/ and /country_defaults/.
"""

__version__ = "1.0.0"
