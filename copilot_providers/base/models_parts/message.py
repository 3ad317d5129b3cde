"""
Message DTO: one conversation turn sent to the model.

Roles follow the chat-completions vocabulary (``system``, ``user``,
``assistant``, ``tool``); ``model`` is accepted as an alias for ``assistant``
and unknown roles are passed through lower-cased.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from .content_part import ContentPart


Role = str


@dataclass
class Message:
    """A chat message whose content is plain text or a list of parts."""

    role: Role
    content: Union[str, List[ContentPart]]

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role="user", content=text)

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role="system", content=text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role="assistant", content=text)

    def is_structured(self) -> bool:
        """Return True if the message content is a list of parts."""
        return isinstance(self.content, list)

    def parts(self) -> List[ContentPart]:
        """Content as a list of parts; a non-empty string becomes one text part."""
        if isinstance(self.content, str):
            return [ContentPart.of_text(self.content)] if self.content else []
        return list(self.content)


__all__ = [
    "Message",
    "Role",
]
