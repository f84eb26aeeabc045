import logging
import threading
from typing import Callable
from typing import List

from pseudoidp.exception import UnknownCustomKey

logger = logging.getLogger(__name__)


class CustomEvaluatorRegistry(object):
    """
    Maps a key to a function ``func(request_input, configuration) -> list``.

    Registration normally happens while the server is set up; lookups
    happen per request.
    """

    def __init__(self):
        self._evaluators = {}
        self._lock = threading.Lock()

    def register(self, key: str, func: Callable):
        with self._lock:
            if key in self._evaluators:
                logger.debug("Replacing custom evaluator {!r}".format(key))
            self._evaluators[key] = func

    def invoke(self, key: str, request_input, configuration) -> List[str]:
        with self._lock:
            try:
                func = self._evaluators[key]
            except KeyError:
                raise UnknownCustomKey("custom method key {!r} is not defined".format(key))
        return func(request_input, configuration)

    def __contains__(self, key):
        with self._lock:
            return key in self._evaluators

    def keys(self):
        with self._lock:
            return list(self._evaluators.keys())
