import traceback


def _type_name(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _stacktrace(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    return "".join(traceback.format_tb(exc.__traceback__))


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _inner_exception_info(exc: BaseException, depth: int, seen: set) -> dict:
    info = {
        "innerExceptionType": _type_name(exc),
        "innerExceptionMessage": str(exc),
        "innerStacktrace": _stacktrace(exc),
    }
    cause = _cause_of(exc)
    if depth > 1 and cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        info["innerException"] = _inner_exception_info(cause, depth - 1, seen)
    return info


def build_exception_info(
    exc: BaseException | None, inner_depth: int = 1
) -> dict | None:
    """Render an exception and its cause chain.

    Args:
        exc: The exception to render, or None
        inner_depth: How many causes to render. The immediate cause is
            ``innerException``; deeper causes nest inside it.

    Returns:
        Dict with exceptionType, exceptionMessage, stacktrace and an optional
        innerException, or None if there is no exception
    """
    if exc is None:
        return None

    info = {
        "exceptionType": _type_name(exc),
        "exceptionMessage": str(exc),
        "stacktrace": _stacktrace(exc),
    }
    cause = _cause_of(exc)
    if inner_depth > 0 and cause is not None and cause is not exc:
        info["innerException"] = _inner_exception_info(
            cause, inner_depth, {id(exc), id(cause)}
        )
    return info


def exception_from_record(record) -> BaseException | None:
    exc_info = getattr(record, "exc_info", None)
    if not exc_info:
        return None
    if isinstance(exc_info, BaseException):
        return exc_info
    if isinstance(exc_info, tuple) and len(exc_info) == 3:
        return exc_info[1]
    return None
