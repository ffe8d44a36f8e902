# Standard library imports
from enum import Enum

# Third-party imports
from fastapi import status


class ServiceError:
    """
    Namespaced error catalogue returned inside ``ServiceResult.failure``.

    Each member's value is ``(code, message, http_status)``.
    """

    class Common(Enum):
        INTERNAL_SERVER_ERROR = (
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        BAD_REQUEST = ("bad_request", "Invalid request data", status.HTTP_400_BAD_REQUEST)
        NETWORK_ERROR = (
            "network_error",
            "Could not reach the data service. Please check your connection and retry.",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    class Auth(Enum):
        SIGN_IN_REQUIRED = ("sign_in_required", "Please sign in to continue", status.HTTP_401_UNAUTHORIZED)
        INVALID_CREDENTIALS = ("invalid_credentials", "Invalid email or password", status.HTTP_401_UNAUTHORIZED)
        EMAIL_ALREADY_REGISTERED = (
            "email_already_registered",
            "An account with this email already exists",
            status.HTTP_409_CONFLICT,
        )
        INVALID_TOKEN = ("invalid_token", "Could not validate credentials", status.HTTP_401_UNAUTHORIZED)
        ADMIN_REQUIRED = ("admin_required", "Administrator access required", status.HTTP_403_FORBIDDEN)

    class Session(Enum):
        SESSION_NOT_FOUND = ("session_not_found", "Session not found", status.HTTP_404_NOT_FOUND)
        SESSION_EXPIRED = ("session_expired", "Session has expired", status.HTTP_401_UNAUTHORIZED)
        SESSION_ALREADY_INVALIDATED = (
            "session_already_invalidated",
            "Session has already been signed out",
            status.HTTP_409_CONFLICT,
        )

    class Issues(Enum):
        ISSUE_NOT_FOUND = ("issue_not_found", "Issue not found", status.HTTP_404_NOT_FOUND)
        INVALID_LOCATION = (
            "invalid_location",
            "Please pick a valid location on the map",
            status.HTTP_400_BAD_REQUEST,
        )
        EMPTY_DESCRIPTION = ("empty_description", "Please describe the issue", status.HTTP_400_BAD_REQUEST)
        INVALID_STATUS = ("invalid_status", "Unknown issue status", status.HTTP_400_BAD_REQUEST)

    class Map(Enum):
        MAP_SESSION_NOT_FOUND = ("map_session_not_found", "Map session not found", status.HTTP_404_NOT_FOUND)
        STORE_CLOSED = ("store_closed", "Map session has been closed", status.HTTP_410_GONE)

    class Chat(Enum):
        CONVERSATION_NOT_FOUND = ("conversation_not_found", "Conversation not found", status.HTTP_404_NOT_FOUND)

    class Notifications(Enum):
        NOTIFICATION_NOT_FOUND = ("notification_not_found", "Notification not found", status.HTTP_404_NOT_FOUND)
        EMPTY_MESSAGE = ("empty_message", "Notification message cannot be empty", status.HTTP_400_BAD_REQUEST)
