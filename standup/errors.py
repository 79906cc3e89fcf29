# standup/errors.py

INTERNAL_ERROR_MESSAGE = "We are sorry, Internal server error."


class ReplyServiceError(Exception):
    status_code = 500
    # key used in the JSON error payload
    payload_key = "message"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {self.payload_key: self.message}


class NotFoundError(ReplyServiceError):
    status_code = 404

    def __init__(self, message: str, payload_key: str = "message"):
        super().__init__(message)
        self.payload_key = payload_key


class BadInputError(ReplyServiceError):
    status_code = 400
    payload_key = "error"


class UnauthorizedError(ReplyServiceError):
    status_code = 401


class StoreFailureError(ReplyServiceError):
    status_code = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        super().__init__(message)
