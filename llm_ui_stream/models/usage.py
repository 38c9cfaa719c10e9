"""Usage models: context-window occupancy and token usage."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class ContextWindowUsage(BaseModel):
    """Context window occupancy reported by the conversation layer."""
    used_tokens: int = Field(..., ge=0, description="Tokens currently in the context window")
    max_tokens: int = Field(..., ge=0, description="Context window size")
    percentage: float = Field(default=0.0, ge=0.0, description="used_tokens / max_tokens * 100")
    remaining_tokens: Optional[int] = Field(None, description="max_tokens - used_tokens")

    @model_validator(mode='before')
    @classmethod
    def accept_camel_case(cls, data: Any) -> Any:
        if isinstance(data, dict):
            aliases = {
                "usedTokens": "used_tokens",
                "maxTokens": "max_tokens",
                "remainingTokens": "remaining_tokens",
            }
            data = {aliases.get(key, key): value for key, value in data.items()}
        return data

    @model_validator(mode='after')
    def fill_remaining(self) -> "ContextWindowUsage":
        if self.remaining_tokens is None:
            self.remaining_tokens = max(self.max_tokens - self.used_tokens, 0)
        return self


class TokenUsage(BaseModel):
    """Normalized token usage attached to the completed conversation."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: Optional[str] = None
    provider: Optional[str] = None
    cache_info: Dict[str, Any] = Field(default_factory=dict)
