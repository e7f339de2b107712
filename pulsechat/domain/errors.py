# pulsechat/domain/errors.py


class DomainError(Exception):
    status_code: int = 400

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__

    @property
    def code(self) -> str:
        return self.__class__.__name__


class Unauthenticated(DomainError):
    status_code = 401

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail)


class NotFound(DomainError):
    status_code = 404


class NotAuthorized(DomainError):
    status_code = 403


class AlreadyResponded(DomainError):
    status_code = 409

    def __init__(self, detail: str = "Invite has already been responded to"):
        super().__init__(detail)


class AlreadyExists(DomainError):
    status_code = 409


class AlreadyPending(DomainError):
    status_code = 409


class InvalidInput(DomainError):
    status_code = 422
