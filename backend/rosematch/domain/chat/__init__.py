"""Chat domain exports."""

from .models import ConversationHandle, ConversationKey
from .service import ConversationService

__all__ = [
	"ConversationHandle",
	"ConversationKey",
	"ConversationService",
]
