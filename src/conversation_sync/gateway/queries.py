"""GraphQL documents understood by the Hasura-backed chat store."""

CREATE_CHAT = """
mutation CreateChat($user_id: uuid!) {
  insert_chats_one(object: { user_id: $user_id }) {
    id
    user_id
    created_at
    updated_at
  }
}
"""

INSERT_MESSAGE = """
mutation InsertMessage($chat_id: uuid!, $content: String!, $sender_type: String!) {
  insert_messages_one(object: { chat_id: $chat_id, content: $content, sender_type: $sender_type }) {
    id
    chat_id
    content
    sender_type
    created_at
  }
}
"""

SEND_MESSAGE_TO_BOT = """
mutation SendMessageToBot($chat_id: uuid!, $content: String!) {
  sendMessageToBot(chat_id: $chat_id, content: $content) {
    success
    message
  }
}
"""

UPDATE_CHAT_TIMESTAMP = """
mutation UpdateChatTimestamp($chat_id: uuid!) {
  update_chats_by_pk(pk_columns: { id: $chat_id }, _set: { updated_at: "now()" }) {
    id
    user_id
    created_at
    updated_at
  }
}
"""

GET_USER_CHATS = """
query GetUserChats($user_id: uuid!) {
  chats(where: { user_id: { _eq: $user_id } }, order_by: { updated_at: desc }) {
    id
    user_id
    created_at
    updated_at
    messages(order_by: { created_at: asc }) {
      id
      chat_id
      content
      sender_type
      created_at
    }
  }
}
"""

GET_CHAT_MESSAGES = """
query GetChatMessages($chat_id: uuid!) {
  messages(where: { chat_id: { _eq: $chat_id } }, order_by: { created_at: asc }) {
    id
    chat_id
    content
    sender_type
    created_at
  }
}
"""
