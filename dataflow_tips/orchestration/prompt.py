"""Prompt assembly."""

from typing import Any, List, Optional, Sequence, Union

from ..models import ConversationMessage, TurnRole


class PromptAssembler:
    """Builds the ordered prompt ``[user, *history, system]``.
    
    The ordering is part of the prompt format the system instructions were
    written for and must not change. Building is pure.
    """
    
    def build(
        self,
        user_message: str,
        history: Optional[Sequence[Union[ConversationMessage, Any]]],
        system_template: str
    ) -> List[ConversationMessage]:
        messages = [ConversationMessage(role=TurnRole.USER, content=user_message)]
        for message in history or ():
            if not isinstance(message, ConversationMessage):
                message = ConversationMessage.model_validate(message)
            messages.append(message)
        messages.append(ConversationMessage(role=TurnRole.SYSTEM, content=system_template))
        return messages
