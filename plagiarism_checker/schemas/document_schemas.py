import base64

from pydantic import BaseModel, ConfigDict


class Document(BaseModel):
    """One submitted document, content base64-encoded."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str    # base64
    mimeType: str

    @property
    def is_plain_text(self) -> bool:
        return self.mimeType.split(";")[0].strip().lower() == "text/plain"

    def decoded_text(self) -> str:
        return base64.b64decode(self.content).decode("utf-8", errors="ignore")


class PastedTextRequest(BaseModel):
    text: str
