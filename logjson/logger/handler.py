from logging import FileHandler, Formatter, StreamHandler

from pydantic import BaseModel


class Handler(BaseModel):
    """A logging handler paired with the formatter it should use.

    When ``formatter`` is left out the handler gets a ``JsonFormatter``.
    """

    handler: StreamHandler | FileHandler
    formatter: Formatter | None = None

    model_config = {"arbitrary_types_allowed": True}
