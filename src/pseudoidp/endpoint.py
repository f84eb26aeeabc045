import json
import logging
import time
from typing import Callable
from typing import Optional

from pseudoidp.configure import Configuration
from pseudoidp.configure import EndpointActionType
from pseudoidp.configure import ErrorResponse
from pseudoidp.exception import PseudoIdPError
from pseudoidp.session import RequestInput
from pseudoidp.utils import OAUTH2_NOCACHE_HEADERS

LOGGER = logging.getLogger(__name__)

DEFAULT_BLOCK_TIMEOUT = 600

"""
method call structure for Endpoints:

process_request
    - error_response  (action_type error)
    - block_response  (action_type block)
    - do_action       (action_type respond or redirect)
        - do_response

process_request returns a dictionary that can look like this::

    {
      'response': _the response body, a string_,
      'response_code': 200,
      'http_headers': [
        ('Content-type', 'application/json; charset=utf-8'),
        ('Pragma', 'no-cache'),
        ('Cache-Control', 'no-store')
      ],
      'redirect_location': _only for redirects_
    }

"response" and "response_code" MUST be present
"http_headers" MAY be present
"""


def set_content_type(headers, content_type):
    if ("Content-type", content_type) in headers:
        return headers

    _headers = [h for h in headers if h[0] != "Content-type"]
    _headers.append(("Content-type", content_type))
    return _headers


class Endpoint(object):
    name = ""
    endpoint_path = ""
    methods = ["GET", "POST"]
    # Attribute of the Configuration that holds this endpoint's action
    action_attr = ""

    def __init__(self, server_get: Callable, **kwargs):
        self.server_get = server_get
        self.block_timeout = kwargs.get("block_timeout", DEFAULT_BLOCK_TIMEOUT)
        self.sleep = kwargs.get("sleep", time.sleep)

    def action(self, configuration: Configuration):
        return getattr(configuration, self.action_attr)

    def process_request(
        self, request_input: RequestInput, configuration: Optional[Configuration] = None
    ) -> dict:
        """
        Apply the configured action to a request.

        :param request_input: The request
        :param configuration: Configuration snapshot, fetched from the
            server if not given
        :return: response description
        """
        if configuration is None:
            configuration = self.server_get("configuration")

        action = self.action(configuration)
        LOGGER.info(
            "{} {} at the {!r} endpoint: {}".format(
                request_input.method, request_input.path, self.name, action.action_type.value
            )
        )

        if action.action_type is EndpointActionType.ERROR:
            return self.error_response(action.error)
        elif action.action_type is EndpointActionType.BLOCK:
            return self.block_response()

        return self.do_action(action, request_input, configuration)

    def do_action(self, action, request_input: RequestInput, configuration: Configuration) -> dict:
        raise NotImplementedError()

    def error_response(self, error: ErrorResponse) -> dict:
        LOGGER.debug("Configured error response: {}".format(error.error_code))
        return self.text_response(error.error_content, error.error_code)

    def block_response(self) -> dict:
        LOGGER.info("Blocking request for {} seconds".format(self.block_timeout))
        self.sleep(self.block_timeout)
        return self.text_response("", 504)

    @staticmethod
    def text_response(message: str, response_code: int) -> dict:
        return {
            "response": message,
            "response_code": response_code,
            "http_headers": [("Content-type", "text/plain; charset=utf-8")],
        }

    def do_response(
        self, content: dict, response_code: Optional[int] = 200, http_headers: Optional[list] = None
    ) -> dict:
        if http_headers is None:
            http_headers = []

        http_headers = set_content_type(http_headers, "application/json; charset=utf-8")
        return {
            "response": json.dumps(content),
            "response_code": response_code,
            "http_headers": http_headers,
        }


class RespondEndpoint(Endpoint):
    """
    An endpoint that answers with a JSON object built from the configured
    parameters.
    """

    def do_action(self, action, request_input: RequestInput, configuration: Configuration) -> dict:
        _resolver = self.server_get("resolver")
        try:
            content = _resolver.resolve_all(action.parameters, request_input, configuration)
        except PseudoIdPError as err:
            LOGGER.error("Failed to build {} response: {}".format(self.name, err))
            return self.text_response(str(err), 500)

        return self.do_response(content, http_headers=list(OAUTH2_NOCACHE_HEADERS))
