import base64
import io

from docx import Document as DocxDocument

from plagiarism_checker.config import ALLOWED_EXTENSIONS, MAX_FILE_SIZE_MB
from plagiarism_checker.exceptions import InputError
from plagiarism_checker.schemas.document_schemas import Document

MIME_TYPES = {
    "txt": "text/plain",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def _to_base64(content_bytes: bytes) -> str:
    return base64.b64encode(content_bytes).decode("ascii")


def extract_docx_text(content_bytes: bytes, filename: str) -> str:
    # Word MIME types are rejected by the provider, so .docx goes over as plain text
    try:
        doc = DocxDocument(io.BytesIO(content_bytes))
    except Exception as e:
        raise InputError(f"Could not parse .docx file: {filename}. {e}") from e
    return "\n".join([p.text for p in doc.paragraphs])


def document_from_text(text: str, name: str) -> Document:
    return Document(name=name, content=_to_base64(text.encode("utf-8")), mimeType="text/plain")


def build_document(content_bytes: bytes, filename: str) -> Document:
    """Turn one uploaded file into a Document ready for the provider."""
    if not filename or not allowed_file(filename):
        raise InputError(f"Invalid file type: {filename}")

    size_mb = len(content_bytes) / (1024 * 1024)
    if size_mb > MAX_FILE_SIZE_MB:
        raise InputError(f"File {filename} exceeds {MAX_FILE_SIZE_MB} MB ({size_mb:.1f} MB).")

    ext = filename.rsplit(".", 1)[1].lower()
    if ext == "docx":
        return document_from_text(extract_docx_text(content_bytes, filename), filename)
    return Document(name=filename, content=_to_base64(content_bytes), mimeType=MIME_TYPES[ext])
