from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SendMessageDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=4000)
    user_id: Optional[UUID] = None
    attachments: list[str] = Field(default_factory=list, max_length=10)
