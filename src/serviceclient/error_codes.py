"""
Error codes and their message templates.

Each member maps to a ``(code, message_template)`` pair. Templates use
positional ``{0}``-style placeholders.
"""

from enum import Enum


class ErrorCode(Enum):
    """Handled error codes shared by services built on this package."""

    REQUIRED_FIELD = ("9001", "{0} is required.")
    FIELD_MAX_LENGTH = ("9002", "{0} length must not exceed {1}.")
    VALUE_BETWEEN = ("9003", "{0} must be between {1} and {2}.")
    FIELD_EXACT_LENGTH = ("9004", "{0} length must be exact {1}.")
    FIELD_PHONE_NUMBER = ("9005", "{0} must be in E.164 format.")
    FIELD_MIN_VALUE = ("9006", "{0} must not less than {1}.")
    FIELD_DATE = ("9007", "{0} must be in yyyy-MM-dd format.")
    FIELD_IDENTITY_TYPE = ("9008", "Invalid Identity Type.")
    FIELD_EMAIL = ("9009", "Invalid email format for {0}.")
    FIELD_TIME = ("9010", "{0} must be in HH:mm:ss format.")
    STATE = ("9011", "Invalid State Code.")
    COUNTRY_CODE = ("9012", "Invalid Country Code.")
    FIELD_LENGTH_WITHIN = ("9013", "{0} length must be minimum {1} to maximum {2}.")
    END_DATE_AFTER_START_DATE = ("9014", "End date must after Start date.")
    DATE_RANGE = ("9015", "End date and Start Date must be within {0} days.")
    FIELD_IDENTITY_NO = ("9016", "Identity No. cannot be 'NA'.")
    INVALID_REQUEST_CONTENT = ("900", "Invalid Request Content")
    HTTP_CLIENT_ERROR = ("901", "HTTP Client Error")
    GENERAL_ERROR = ("999", "Error Occurred")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def message_template(self) -> str:
        return self.value[1]

    def format(self, *args: object) -> str:
        """Render the message template with positional arguments."""
        return self.message_template.format(*args)

    @classmethod
    def from_code(cls, code: str) -> "ErrorCode":
        """
        Look up a member by its code.

        Raises:
            ValueError: If no member carries the code.
        """
        for member in cls:
            if member.code == code:
                return member
        raise ValueError(f"Unknown error code: {code!r}")
