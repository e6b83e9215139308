# roomcast wire constants (string keys and method names)

DEFAULT_NETWORK_TYPE = "janus"
PROTOCOL_VERSION = "0"

# Envelope keys
K_TYPE = "type"
K_DATA = "data"

# Presence payload keys
K_METHOD = "method"

# Presence methods
M_USER_ENTER = "user_enter"
M_USER_LEAVE = "user_leave"
M_USER_MOVED = "user_moved"
M_USER_CHAT = "user_chat"
M_USERS_ONLINE = "users_online"

PRESENCE_METHODS = frozenset(
    {
        M_USER_ENTER,
        M_USER_LEAVE,
        M_USER_MOVED,
        M_USER_CHAT,
        M_USERS_ONLINE,
    }
)

# Method data keys
D_USER_ID = "userId"
D_ROOM_ID = "roomId"
D_POSITION = "position"
D_MESSAGE = "message"
D_USERS = "users"

# Position keys
P_POS = "pos"
P_DIR = "dir"
P_VIEW_DIR = "view_dir"

# Session data keys. The namespace is advertised under "type", same as the
# envelope, so peers can be matched without decoding any payload.
S_TYPE = "type"
S_USER_ID = "userId"
S_ROOM_ID = "roomId"
S_VERSION = "version"

# Transport events
EV_MESSAGE = "message"
EV_CONNECT = "connect"
EV_DISCONNECT = "disconnect"
