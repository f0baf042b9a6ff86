from __future__ import annotations

from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from imageproxy.image_generation.model_output import ImagePayload
from imageproxy.types import ImagePayloadKind


class ExtractionStrategy(BaseModel):
    """
    Looks for an image in ``payload[container][0][field]``.

    Providers disagree on where the image lives (``data`` or ``images``, ``b64_json`` or
    ``b64_data``), so adapters declare an ordered list of strategies and the first match wins.
    """

    model_config = ConfigDict(frozen=True)

    container: str
    field: str
    kind: ImagePayloadKind

    @property
    def path(self) -> str:
        return f'{self.container}[0].{self.field}'

    def extract(self, payload: Any) -> Optional[ImagePayload]:
        if not isinstance(payload, dict):
            return None
        items = payload.get(self.container)
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            return None
        value = items[0].get(self.field)
        if isinstance(value, str) and value:
            return ImagePayload(kind=self.kind, value=value, path=self.path)
        return None


def extract_image(payload: Any, strategies: Sequence[ExtractionStrategy]) -> Optional[ImagePayload]:
    for strategy in strategies:
        image_payload = strategy.extract(payload)
        if image_payload is not None:
            return image_payload
    return None


def inline(container: str, field: str) -> ExtractionStrategy:
    return ExtractionStrategy(container=container, field=field, kind='inline-base64')


def url(container: str, field: str = 'url') -> ExtractionStrategy:
    return ExtractionStrategy(container=container, field=field, kind='url')
