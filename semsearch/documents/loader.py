"""Loading whole text files as single documents."""

from abc import ABC, abstractmethod
from pathlib import Path

from semsearch.documents.models import Document
from semsearch.exceptions import DocumentError, ErrorCode


class DocumentLoader(ABC):
    """Turns a source into one Document."""

    @abstractmethod
    def load(self, source: str | Path) -> Document:
        """Load a document, raising DocumentError if it cannot be used."""
        ...


class TextFileLoader(DocumentLoader):
    """Reads a plain text file wholesale into one Document.

    There is no chunking: each file becomes a single embedding input, so a
    file over the model's token budget is rejected later by the embedding
    API. Files with no visible text are rejected here, since an empty input
    is an API error that costs a request.

    The default ``utf-8-sig`` encoding reads plain UTF-8 and drops a leading
    byte order mark, which would otherwise end up in the embedded text.
    """

    def __init__(self, encoding: str = "utf-8-sig") -> None:
        self.encoding = encoding

    def load(self, source: str | Path) -> Document:
        """Read a file as one document.

        Raises:
            DocumentError: SEM-2000 if the path does not exist, SEM-2001 if it
                is not a regular file or cannot be decoded, SEM-2002 if it
                holds only whitespace.
        """
        path = Path(source)
        content = self._read(path)

        if not content.strip():
            raise DocumentError(
                f"File has no text to embed: {path}",
                code=ErrorCode.DOCUMENT_EMPTY,
                details={"path": str(path), "length": len(content)},
            )

        return Document.from_text(
            content=content,
            source=str(path),
            file_name=path.name,
        )

    def _read(self, path: Path) -> str:
        if not path.exists():
            raise DocumentError(
                f"File not found: {path}",
                code=ErrorCode.DOCUMENT_NOT_FOUND,
                details={"path": str(path)},
            )
        if not path.is_file():
            raise DocumentError(
                f"Not a regular file: {path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path)},
            )

        try:
            return path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as e:
            raise DocumentError(
                f"{path} is not valid {self.encoding} text",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path), "encoding": self.encoding, "offset": e.start},
            ) from e
        except OSError as e:
            raise DocumentError(
                f"Cannot read {path}: {e.strerror or e}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path), "errno": e.errno},
            ) from e
