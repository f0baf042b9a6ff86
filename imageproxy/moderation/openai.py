from __future__ import annotations

import logging
from typing import List

from httpx import Response
from pydantic import BaseModel, ConfigDict

from imageproxy.exception import ConfigurationError
from imageproxy.http import HttpClient, HttpxPostKwargs, UnexpectedResponseError
from imageproxy.model import ModelInfo
from imageproxy.platforms.openai import OpenAISettings

logger = logging.getLogger(__name__)


class ModerationOutput(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_info: ModelInfo
    flagged: bool
    categories: List[str] = []


class OpenAIModeration:
    model_task = 'moderation'
    model_type = 'openai'

    def __init__(
        self,
        model: str = 'omni-moderation-latest',
        settings: OpenAISettings | None = None,
        http_client: HttpClient | None = None,
    ) -> None:
        self.model = model
        self.settings = settings or OpenAISettings()
        self.http_client = http_client or HttpClient()

    def _get_request_parameters(self, prompt: str) -> HttpxPostKwargs:
        if not self.settings.has_api_key:
            raise ConfigurationError(f'OpenAI key not configured. Set env var {OpenAISettings.env_var_name("api_key")}.')
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.settings.api_key.get_secret_value()}',  # type: ignore
        }
        return {
            'url': self.settings.api_base.rstrip('/') + '/moderations',
            'json': {'model': self.model, 'input': prompt},
            'headers': headers,
        }

    def classify(self, prompt: str) -> ModerationOutput:
        request_parameters = self._get_request_parameters(prompt)
        response = self.http_client.post(request_parameters=request_parameters)
        return self._construct_model_output(response)

    async def async_classify(self, prompt: str) -> ModerationOutput:
        request_parameters = self._get_request_parameters(prompt)
        response = await self.http_client.async_post(request_parameters=request_parameters)
        return self._construct_model_output(response)

    def _construct_model_output(self, response: Response) -> ModerationOutput:
        response_data = response.json()
        results = response_data.get('results') if isinstance(response_data, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise UnexpectedResponseError(response_data)
        result = results[0]
        category_flags = result.get('categories') or {}
        if not isinstance(category_flags, dict):
            raise UnexpectedResponseError(response_data)
        categories = [name for name, flagged in category_flags.items() if flagged]
        return ModerationOutput(model_info=self.model_info, flagged=bool(result.get('flagged')), categories=categories)

    @property
    def model_info(self) -> ModelInfo:
        return ModelInfo(task=self.model_task, type=self.model_type, name=self.model)
