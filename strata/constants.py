from http import HTTPStatus

DEFAULT_STATUS = HTTPStatus.NOT_FOUND

EMPTY_STATUSES = frozenset(
    {
        HTTPStatus.NO_CONTENT,
        HTTPStatus.RESET_CONTENT,
        HTTPStatus.NOT_MODIFIED,
    }
)

STATUS_MESSAGES = {status.value: status.phrase for status in HTTPStatus}

MIME_ALIASES = {
    "text": "text/plain",
    "txt": "text/plain",
    "html": "text/html",
    "json": "application/json",
    "bin": "application/octet-stream",
    "xml": "application/xml",
    "form": "application/x-www-form-urlencoded",
}

TEXTUAL_CONTENT_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-www-form-urlencoded",
}

TEXTUAL_PREFIXES = ("text/",)

REQUEST_BODY_QUEUE_SIZE = 16
