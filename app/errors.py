"""Errors raised while reading request bodies.

Each carries the status code a client error would normally map to. The
catch-all responder does not look at it; it is kept for logging and for
handlers mounted below the parser that want to inspect the failure.
"""


class RequestBodyError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BodyParseError(RequestBodyError):
    """The body is not valid JSON, or its top level is not an object or array."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class PayloadTooLargeError(RequestBodyError):
    status_code = 413

    def __init__(self, length: int, limit: int):
        super().__init__(f"request entity too large ({length} > {limit} bytes)")
        self.length = length
        self.limit = limit


class UnsupportedCharsetError(RequestBodyError):
    status_code = 415

    def __init__(self, charset: str):
        super().__init__(f'unsupported charset "{charset.upper()}"')
        self.charset = charset
