"""Reading and replacing the live configuration over HTTP"""
import json
import logging
from typing import Optional
from urllib.parse import urlparse

from pseudoidp import JSON_ENCODED
from pseudoidp.configure import Configuration
from pseudoidp.endpoint import Endpoint
from pseudoidp.exception import ConfigurationError
from pseudoidp.exception import InvalidRequest
from pseudoidp.session import RequestInput
from pseudoidp.utils import get_header

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-Pseudo-IDP-CSRF-Protection"


def check_csrf(request_input: RequestInput):
    """
    Requests that change the configuration must carry the custom header,
    a JSON content type and an Origin matching the host.

    :param request_input: The request
    :raises InvalidRequest: if any check fails
    """
    _headers = request_input.headers
    if get_header(_headers, CSRF_HEADER) != "1":
        raise InvalidRequest("invalid Request")

    if get_header(_headers, "Content-Type") != JSON_ENCODED:
        raise InvalidRequest("invalid Request")

    host = request_input.domain
    if not host:
        raise InvalidRequest("invalid Request")

    _origin = urlparse(get_header(_headers, "Origin"))
    if not _origin.scheme or _origin.netloc != host:
        raise InvalidRequest("invalid Request")


class ConfigEndpoint(Endpoint):
    """
    GET returns the live configuration, POST replaces it and DELETE resets
    it to the default. All methods answer with the configuration in force
    after the request.
    """

    name = "config"
    endpoint_path = "config"
    methods = ["GET", "POST", "DELETE"]

    def process_request(
        self,
        request_input: RequestInput,
        configuration: Optional[Configuration] = None,
        body: Optional[str] = "",
    ) -> dict:
        _store = self.server_get("configuration_store")

        if request_input.method in ["POST", "DELETE"]:
            try:
                check_csrf(request_input)
            except InvalidRequest as err:
                logger.warning("Rejected configuration change: {}".format(err))
                return self.text_response(str(err), 400)

        if request_input.method == "POST":
            if not body:
                return self.text_response("No config sent", 400)
            try:
                _new = Configuration.from_dict(json.loads(body))
            except (ValueError, ConfigurationError) as err:
                logger.warning("Invalid configuration: {}".format(err))
                return self.text_response(str(err), 400)
            _store.replace(_new)
        elif request_input.method == "DELETE":
            _store.reset()

        return self.do_response(_store.snapshot().dump())
