"""Document loading module."""

from semsearch.documents.loader import DocumentLoader, TextFileLoader
from semsearch.documents.models import Document, DocumentMetadata

__all__ = [
    "Document",
    "DocumentLoader",
    "DocumentMetadata",
    "TextFileLoader",
]
