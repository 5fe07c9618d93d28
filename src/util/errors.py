from typing import Any


class ServiceError(Exception):
    error_code: int
    http_status: int
    emoji: str

    def __init__(
        self,
        message: str,
        error_code: int,
        http_status: int = 500,
        emoji: str = "⚠️",
    ):
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status
        self.emoji = emoji

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        return self.to_log_string()

    def to_log_string(self) -> str:
        cause_str = f" # Caused by: {self.__cause__}" if self.__cause__ else ""
        return f"[{self.emoji} E{self.error_code}] {self.message}{cause_str}"

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "emoji": self.emoji,
        }


class ValidationError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "✏️"):
        super().__init__(message, error_code, http_status = 400, emoji = emoji)


class NotFoundError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "🔍"):
        super().__init__(message, error_code, http_status = 404, emoji = emoji)


class ConflictError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "👯"):
        super().__init__(message, error_code, http_status = 409, emoji = emoji)


class AuthenticationError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "🔑"):
        super().__init__(message, error_code, http_status = 401, emoji = emoji)


class DataUnavailableError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "⏳"):
        super().__init__(message, error_code, http_status = 503, emoji = emoji)


class StoreError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "🗄️"):
        super().__init__(message, error_code, http_status = 500, emoji = emoji)


class InternalError(ServiceError):
    def __init__(self, message: str, error_code: int, emoji: str = "⚠️"):
        super().__init__(message, error_code, http_status = 500, emoji = emoji)
