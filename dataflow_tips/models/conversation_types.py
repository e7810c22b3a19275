from pydantic import BaseModel, ConfigDict, Field
from typing import List
from enum import Enum


class TurnRole(str, Enum):
    """Conversation turn roles."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationMessage(BaseModel):
    """One message of a prompt or of the conversation history."""
    
    model_config = ConfigDict(frozen=True, use_enum_values=True)
    
    role: TurnRole
    content: str


class ConversationRequest(BaseModel):
    """The current user message plus its chronological history."""
    
    model_config = ConfigDict(frozen=True)
    
    current_message: str
    history: List[ConversationMessage] = Field(default_factory=list)
