"""
Client core for chatting with an automated responder.

The pieces, leaves first:

    'ChatGateway'          - remote store and responder ('gateway')
    'SendOrchestrator'     - one user submission end to end ('orchestrator')
    'ConversationViewModel'/'ChatListViewModel' - in-memory views ('views')
    'SyncCoordinator'      - refresh signal shared by sends, chat creation and polling ('sync')
    'ChatAppController'    - facade wiring them together for a front-end ('controller')
"""

from conversation_sync.controller import ChatAppController
from conversation_sync.orchestrator import SendOrchestrator

__all__ = ["ChatAppController", "SendOrchestrator"]
