from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from imageproxy.image_generation.size import format_size
from imageproxy.model import ModelInfo
from imageproxy.types import ImagePayloadKind, PositiveInt, SourceFormat

DEFAULT_IMAGE_MIME = 'image/png'


class GenerationRequest(BaseModel):
    prompt: Annotated[str, Field(min_length=1)]
    width: PositiveInt
    height: PositiveInt
    extras: Dict[str, Any] = {}

    @property
    def size(self) -> str:
        return format_size(self.width, self.height)


class ImagePayload(BaseModel):
    kind: ImagePayloadKind
    value: str
    path: str


class GenerationResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_info: ModelInfo
    image_base64: str
    source_format: SourceFormat
    mime: str = DEFAULT_IMAGE_MIME
    url: Optional[str] = None

    @classmethod
    def from_bytes(cls, content: bytes, **kwargs: Any) -> GenerationResult:
        return cls(image_base64=base64.b64encode(content).decode('ascii'), **kwargs)

    @property
    def image_bytes(self) -> bytes:
        return base64.b64decode(self.image_base64)

    def to_data_url(self) -> str:
        return f'data:{self.mime};base64,{self.image_base64}'

    def save_image(self, path: str | Path) -> None:
        path = Path(path)
        if path.suffix != '.png':
            raise ValueError(f'path suffix {path.suffix} does not match image format png')
        path.write_bytes(self.image_bytes)
