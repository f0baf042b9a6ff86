from imageproxy.moderation.openai import ModerationOutput, OpenAIModeration

__all__ = [
    'ModerationOutput',
    'OpenAIModeration',
]
