import contextvars
from contextlib import contextmanager

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
fid_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("fid", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def get_fid() -> str | None:
    """Retrieve the identifier currently being served, for logging."""
    return fid_var.get()


@contextmanager
def log_context(fid: int | str | None = None):
    """Temporarily scope the served identifier for structured logs."""
    token = fid_var.set(str(fid)) if fid is not None else None
    try:
        yield
    finally:
        if token is not None:
            fid_var.reset(token)
