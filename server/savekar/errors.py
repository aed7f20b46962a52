# server/savekar/errors.py

from typing import Optional


class ServiceError(Exception):
    """Base for failures that map onto an HTTP error response.

    Services raise these; the application error handler turns them into the
    standard error envelope. Anything that is not a ServiceError is treated as
    an internal failure and never exposed to the caller.
    """

    status = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, data: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.data = data


class BadRequestError(ServiceError):
    status = 400
    code = "BAD_REQUEST"


class UnauthorizedError(ServiceError):
    status = 401
    code = "UNAUTHORIZED"


class NotFoundError(ServiceError):
    status = 404
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    status = 409
    code = "CONFLICT"


class DuplicateWebsiteError(ConflictError):
    code = "URL_EXISTS"

    def __init__(self, existing):
        super().__init__(
            "This website already exists in your collection",
            data={"existing_website": existing.to_dict()},
        )
        self.existing = existing


class FolderNotEmptyError(ConflictError):
    # a conflict with current state, reported as 400 to clients
    status = 400
    code = "FOLDER_HAS_SUBFOLDERS"

    def __init__(self):
        super().__init__("Cannot delete folder with subfolders. Please delete subfolders first.")
