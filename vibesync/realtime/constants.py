# Client -> server
AUTHENTICATE = "authenticate"
JOIN_CONVERSATION = "join-conversation"
LEAVE_CONVERSATION = "leave-conversation"
TYPING = "typing"
MARK_MESSAGES_READ = "mark-messages-read"

# Server -> room
NEW_MESSAGE = "new-message"
USER_TYPING = "user-typing"
MESSAGES_READ = "messages-read"

# Server -> user
NOTIFICATION = "notification"
UNREAD_COUNT = "unread-count"

# Call signaling, relayed user -> user with the same event name
CALL_OFFER = "call-offer"
CALL_ANSWER = "call-answer"
ICE_CANDIDATE = "ice-candidate"
CALL_END = "call-end"
