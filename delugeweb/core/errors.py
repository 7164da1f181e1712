class DelugeError(Exception):
    def __init__(self, message: str):
        super().__init__(message)


class AuthenticationError(DelugeError):
    def __init__(self, message: str):
        super().__init__(message)


class RpcError(DelugeError):
    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self._method = method

    @property
    def method(self) -> str | None:
        return self._method


class NotFoundError(DelugeError):
    def __init__(self, message: str):
        super().__init__(message)


class UploadError(DelugeError):
    def __init__(self, message: str):
        super().__init__(message)


class AddTorrentError(DelugeError):
    def __init__(self, message: str):
        super().__init__(message)
