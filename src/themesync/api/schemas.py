"""Response and request shapes exchanged with the theme-asset API.

Bodies are validated once, where they leave the HTTP layer. A missing
envelope field becomes ``None`` here and a named error in the client.
"""

from __future__ import annotations

import base64
import binascii
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from themesync.errors import IncompleteAssetError


class Asset(BaseModel):
    """A single theme asset as returned by ``retrieve``."""

    model_config = ConfigDict(extra="ignore")

    key: str
    value: str | None = None
    attachment: str | None = None
    content_type: str | None = None
    size: int | None = None
    updated_at: str | None = None

    @property
    def kind(self) -> Literal["text", "binary"]:
        """Which payload field the server populated."""

        if self.value is not None:
            return "text"
        if self.attachment is not None:
            return "binary"
        raise IncompleteAssetError("Parsed object is not complete")

    def contents(self) -> bytes:
        """Decode the populated payload field into bytes ready for disk."""

        if self.kind == "text":
            return self.value.encode("utf-8")
        try:
            return base64.b64decode(self.attachment, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise IncompleteAssetError(f"Attachment for {self.key} is not valid base64") from exc


class AssetSummary(BaseModel):
    """An entry of the asset listing; carries no payload."""

    model_config = ConfigDict(extra="ignore")

    key: str
    content_type: str | None = None
    size: int | None = None


class Theme(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    role: str | None = ""

    def describe(self) -> str:
        """Render ``<id> - <name>`` with `` (<role>)`` appended for non-empty roles."""

        line = f"{self.id} - {self.name}"
        if self.role:
            line += f" ({self.role})"
        return line


class AssetEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    asset: Asset | None = None


class AssetListEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    assets: list[AssetSummary] | None = None


class ThemeListEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    themes: list[Theme] | None = None


class AssetUpload(BaseModel):
    """Body of an asset update; exactly one of ``value`` / ``attachment`` is set."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str | None = None
    attachment: str | None = Field(default=None, repr=False)

    @model_validator(mode="after")
    def _one_payload(self) -> AssetUpload:
        if (self.value is None) == (self.attachment is None):
            raise ValueError("Exactly one of value or attachment must be populated.")
        return self

    @classmethod
    def from_bytes(cls, key: str, data: bytes, *, binary: bool) -> AssetUpload:
        if binary:
            return cls(key=key, attachment=base64.b64encode(data).decode("ascii"))
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            # The sniffed block looked like text but the rest of the file does not.
            return cls.from_bytes(key, data, binary=True)
        return cls(key=key, value=text)

    def to_request(self) -> dict[str, dict[str, str]]:
        return {"asset": self.model_dump(exclude_none=True)}
