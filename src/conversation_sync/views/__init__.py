from conversation_sync.views.chat_list import (
    ChatListItem,
    ChatListViewModel,
    format_display_date,
    preview_text,
    sort_chats,
)
from conversation_sync.views.conversation import ConversationState, ConversationViewModel

__all__ = [
    "ChatListItem",
    "ChatListViewModel",
    "ConversationState",
    "ConversationViewModel",
    "format_display_date",
    "preview_text",
    "sort_chats",
]
