from logging import getLogger, NullHandler

__all__ = ['logger']


logger = getLogger("lastcall")
logger.addHandler(NullHandler())
