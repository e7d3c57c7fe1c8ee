"""Ошибки сервиса заявок.

Каждая ошибка несёт сообщение для клиента и HTTP-статус, который
выставляют обработчики исключений в api/app.py.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Некорректные или отсутствующие поля заявки (400)."""

    status_code = 400


class RateLimitedError(AppError):
    """Повторная заявка с тем же (telegram, role) в окне охлаждения (429)."""

    status_code = 429

    def __init__(self, message: str = "duplicate submission", retry_after: float = 0.0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class AuthorizationError(AppError):
    """Чат не входит в allow-list. Клиенту детали не сообщаются."""

    status_code = 403


class StorageError(AppError):
    """Хранилище недоступно или запрос завершился ошибкой.

    retryable=True для таймаутов и проблем соединения (503),
    False для ошибок самого запроса (500).
    """

    def __init__(self, message: str = "storage unavailable", retryable: bool = True) -> None:
        super().__init__(message, status_code=503 if retryable else 500)
        self.retryable = retryable


class NotFoundRecord(AppError):
    """Запись по id/смещению отсутствует."""

    status_code = 404
