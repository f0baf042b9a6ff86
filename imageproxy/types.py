from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import Field
from typing_extensions import Annotated

PrimitiveData = Optional[Union[str, int, float, bool]]
PositiveInt = Annotated[int, Field(gt=0)]
SourceFormat = Literal['inline-base64', 'fetched-url']
ImagePayloadKind = Literal['inline-base64', 'url']
FailureStage = Literal['moderation', 'generation', 'fetch-remote-image']
ImageEncoding = Literal['base64', 'data_url']
