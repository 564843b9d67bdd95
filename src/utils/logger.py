import logging

from config.settings import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = None) -> logging.Logger:
    """The ``roadmap`` logger, or its child ``roadmap.<name>``.

    The console handler is attached once; Streamlit reruns re-import this
    module and must not stack handlers.
    """
    base = logging.getLogger("roadmap")
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        base.addHandler(handler)
        base.setLevel(logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO))
        base.propagate = False
    return base.getChild(name) if name else base


logger = get_logger()
