import logging
import threading
from typing import Dict
from typing import List

from oidcmsg.time_util import utc_time_sans_frac

from pseudoidp.exception import SessionNotFound
from pseudoidp.utils import first_value

from .info import RequestInput
from .info import Session

logger = logging.getLogger(__name__)


class SessionStore(object):
    """
    In memory, code keyed sessions. Sessions are written once at the
    authorization endpoint and read at the token endpoint. There is no
    expiry.
    """

    def __init__(self):
        self._db = {}
        self._lock = threading.Lock()

    def create(self, request_input: RequestInput, params: Dict[str, List[str]]):
        """
        Record a session from an authorization request and the parameters
        returned to the client.

        :param request_input: The authorization request
        :param params: The resolved redirect parameters
        """
        code = first_value(params, "code")
        if not code:
            # implicit style response, nothing to correlate later
            return

        redirect_uri = first_value(params, "redirect_uri")
        if not redirect_uri:
            redirect_uri = first_value(request_input.url_params, "redirect_uri")

        _url = request_input.url_params
        session = Session(
            code=code,
            client_id=first_value(_url, "client_id"),
            nonce=first_value(_url, "nonce"),
            code_challenge=first_value(_url, "code_challenge"),
            code_challenge_method=first_value(_url, "code_challenge_method"),
            redirect_uri=redirect_uri,
        )

        with self._lock:
            self._db[code] = session
        logger.debug("Created session: {}".format(session.dump(exclude_attributes=["code"])))

    def lookup(self, code: str) -> Session:
        with self._lock:
            try:
                session = self._db[code]
            except KeyError:
                raise SessionNotFound("no session found for code")
        logger.debug(
            "Session for client {!r} is {} seconds old".format(
                session.client_id, utc_time_sans_frac() - session.created_at
            )
        )
        return session

    def __contains__(self, code):
        with self._lock:
            return code in self._db

    def __len__(self):
        with self._lock:
            return len(self._db)
