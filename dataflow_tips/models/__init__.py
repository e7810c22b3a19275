from .conversation_types import ConversationMessage, ConversationRequest, TurnRole

__all__ = [
    "ConversationMessage",
    "ConversationRequest",
    "TurnRole",
]
