"""Tests for document models and loaders."""

from pathlib import Path

import pytest

from semsearch.documents.loader import TextFileLoader
from semsearch.documents.models import Document, DocumentMetadata
from semsearch.exceptions import DocumentError, ErrorCode


class TestDocumentMetadata:
    """Tests for DocumentMetadata model."""

    def test_default_values(self) -> None:
        """Metadata has sensible defaults."""
        meta = DocumentMetadata(source="test.txt")
        assert meta.source == "test.txt"
        assert meta.extra == {}
        assert meta.created_at.tzinfo is not None


class TestDocument:
    """Tests for Document model."""

    def test_from_text_with_extra(self) -> None:
        """Document preserves extra metadata."""
        doc = Document.from_text(content="Test content", source="test.txt", author="tester")
        assert doc.content == "Test content"
        assert doc.metadata.extra["author"] == "tester"

    def test_record_metadata(self) -> None:
        """Record metadata is flat and serialisable."""
        doc = Document.from_text(content="x", source="/tmp/a.txt", file_name="a.txt")
        metadata = doc.record_metadata(index=4)

        assert metadata["source"] == "/tmp/a.txt"
        assert metadata["file_name"] == "a.txt"
        assert metadata["index"] == 4
        assert isinstance(metadata["created_at"], str)


class TestTextFileLoader:
    """Tests for TextFileLoader."""

    def test_load_whole_file(self, tmp_path: Path) -> None:
        """The whole file becomes one document."""
        path = tmp_path / "notes.txt"
        path.write_text("line one\nline two\n", encoding="utf-8")

        doc = TextFileLoader().load(path)

        assert doc.content == "line one\nline two\n"
        assert doc.metadata.source == str(path)
        assert doc.metadata.extra["file_name"] == "notes.txt"

    def test_load_accepts_str(self, tmp_path: Path) -> None:
        """Paths may be given as strings."""
        path = tmp_path / "a.md"
        path.write_text("# heading", encoding="utf-8")

        assert TextFileLoader().load(str(path)).content == "# heading"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files raise DocumentError."""
        with pytest.raises(DocumentError) as exc_info:
            TextFileLoader().load(tmp_path / "nope.txt")

        assert exc_info.value.code == ErrorCode.DOCUMENT_NOT_FOUND

    def test_directory(self, tmp_path: Path) -> None:
        """Directories are not documents."""
        with pytest.raises(DocumentError) as exc_info:
            TextFileLoader().load(tmp_path)

        assert exc_info.value.code == ErrorCode.DOCUMENT_PARSE_ERROR

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Bytes that are not valid in the encoding raise DocumentError."""
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(DocumentError) as exc_info:
            TextFileLoader().load(path)

        assert exc_info.value.code == ErrorCode.DOCUMENT_PARSE_ERROR

    @pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
    def test_blank_file_rejected(self, tmp_path: Path, content: str) -> None:
        """Files without visible text never reach the embedding API."""
        path = tmp_path / "blank.txt"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(DocumentError) as exc_info:
            TextFileLoader().load(path)

        assert exc_info.value.code == ErrorCode.DOCUMENT_EMPTY
        assert exc_info.value.details["path"] == str(path)

    def test_byte_order_mark_stripped(self, tmp_path: Path) -> None:
        """A UTF-8 BOM is not part of the document text."""
        path = tmp_path / "bom.txt"
        path.write_bytes(b"\xef\xbb\xbfhello world")

        doc = TextFileLoader().load(path)

        assert doc.content == "hello world"

    def test_explicit_encoding(self, tmp_path: Path) -> None:
        """Other encodings can be chosen."""
        path = tmp_path / "latin.txt"
        path.write_bytes("café".encode("latin-1"))

        assert TextFileLoader(encoding="latin-1").load(path).content == "café"
