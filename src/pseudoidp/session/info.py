import datetime
from typing import Dict
from typing import List
from typing import Optional

from oidcmsg.impexp import ImpExp
from oidcmsg.time_util import utc_time_sans_frac


class Session(ImpExp):
    """
    Authorization flow state, keyed by the code returned from the
    authorization endpoint.
    """

    parameter = {
        "code": "",
        "client_id": "",
        "nonce": "",
        "code_challenge": "",
        "code_challenge_method": "",
        "redirect_uri": "",
        "created_at": 0,
    }

    def __init__(
        self,
        code: Optional[str] = "",
        client_id: Optional[str] = "",
        nonce: Optional[str] = "",
        code_challenge: Optional[str] = "",
        code_challenge_method: Optional[str] = "",
        redirect_uri: Optional[str] = "",
        created_at: Optional[int] = 0,
    ):
        ImpExp.__init__(self)
        self.code = code
        self.client_id = client_id
        self.nonce = nonce
        self.code_challenge = code_challenge
        self.code_challenge_method = code_challenge_method
        self.redirect_uri = redirect_uri
        self.created_at = created_at or utc_time_sans_frac()

    def __repr__(self):
        return "Session(code={!r}, client_id={!r})".format(self.code, self.client_id)


class RequestInput(object):
    """
    Per request context. Source for passthrough parameters and the
    variables available in templates.

    url_params and form_params map a name to a list of values.
    """

    def __init__(
        self,
        domain: Optional[str] = "",
        method: Optional[str] = "GET",
        path: Optional[str] = "",
        proto: Optional[str] = "",
        headers: Optional[Dict[str, str]] = None,
        url_params: Optional[Dict[str, List[str]]] = None,
        form_params: Optional[Dict[str, List[str]]] = None,
        session: Optional[Session] = None,
        time: Optional[datetime.datetime] = None,
    ):
        self.domain = domain
        self.method = method
        self.path = path
        self.proto = proto
        self.headers = dict(headers or {})
        self.url_params = {k: list(v) for k, v in (url_params or {}).items()}
        self.form_params = {k: list(v) for k, v in (form_params or {}).items()}
        self.session = session
        self.time = time or datetime.datetime.now(datetime.timezone.utc)

    def get_param(self, name: str) -> List[str]:
        """URL query values take precedence over form values."""
        if name in self.url_params:
            return list(self.url_params[name])
        if name in self.form_params:
            return list(self.form_params[name])
        return []

    def template_context(self) -> dict:
        return {
            "domain": self.domain,
            "method": self.method,
            "path": self.path,
            "proto": self.proto,
            "headers": self.headers,
            "url_params": self.url_params,
            "form_params": self.form_params,
            "session": self.session,
            "time": self.time,
        }
