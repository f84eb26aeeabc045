import logging
from typing import Dict
from typing import List
from urllib.parse import unquote_plus
from urllib.parse import urlencode

from pseudoidp.configure import AuthRedirect
from pseudoidp.configure import Configuration
from pseudoidp.endpoint import Endpoint
from pseudoidp.exception import InvalidRequest
from pseudoidp.exception import PseudoIdPError
from pseudoidp.parameter import Parameter
from pseudoidp.parameter import ParameterAction
from pseudoidp.session import RequestInput
from pseudoidp.utils import OAUTH2_NOCACHE_HEADERS

logger = logging.getLogger(__name__)


def redirect_location(redirect_uri: str, params: Dict[str, List[str]], fragment_enc: bool) -> str:
    """
    Add parameters to a redirect URI.

    :param redirect_uri: The target
    :param params: Parameter name to list of values
    :param fragment_enc: Put the parameters in the fragment instead of the query
    :return: URL
    """
    _qp = urlencode([(k, v) for k, vals in params.items() for v in vals])
    if not _qp:
        return redirect_uri

    if fragment_enc:
        return "{}#{}".format(redirect_uri, _qp)
    elif "?" in redirect_uri:
        return "{}&{}".format(redirect_uri, _qp)
    return "{}?{}".format(redirect_uri, _qp)


class Authorization(Endpoint):
    """
    The authorization endpoint. Redirects back to the client with passed
    through, replaced or generated parameters.
    """

    name = "authorization"
    endpoint_path = "oauth2/auth"
    action_attr = "auth_action"

    def redirect_params(
        self, redirect: AuthRedirect, request_input: RequestInput, configuration: Configuration
    ) -> Dict[str, List[str]]:
        """
        Request parameters are handled first, in request order. Configured
        parameters that were not in the request follow in configuration
        order.
        """
        _resolver = self.server_get("resolver")
        _configured = {}
        for param in redirect.parameters:
            _configured[param.id] = param

        params = {}
        for _id in request_input.url_params:
            if _id not in _configured:
                params[_id] = _resolver.default_value(
                    _id, redirect.default_parameter_action, request_input
                )
                continue

            vals = _resolver.resolve(_configured[_id], request_input, configuration)
            if vals:
                params[_id] = vals

        for _id, param in _configured.items():
            if _id in request_input.url_params:
                continue
            vals = _resolver.resolve(param, request_input, configuration)
            if vals:
                params[_id] = vals

        return params

    def redirect_uri(
        self, redirect: AuthRedirect, request_input: RequestInput, configuration: Configuration
    ) -> str:
        """
        A fixed target or a custom evaluator when a custom redirect is
        configured, else the redirect_uri request parameter.
        """
        _target = redirect.redirect_target
        if _target.use_custom_redirect_uri:
            if _target.target:
                return _target.target
            elif _target.custom_key:
                _param = Parameter(
                    id="redirect_uri", action=ParameterAction.CUSTOM, custom_key=_target.custom_key
                )
                vals = self.server_get("resolver").resolve(_param, request_input, configuration)
                if not vals:
                    raise InvalidRequest("custom function did not return any values")
                return vals[0]
            raise InvalidRequest("missing custom redirect config")

        _vals = request_input.url_params.get("redirect_uri")
        if not _vals:
            raise InvalidRequest("missing redirect_uri")
        return unquote_plus(_vals[0])

    def do_action(self, action, request_input: RequestInput, configuration: Configuration) -> dict:
        redirect = action.redirect
        try:
            params = self.redirect_params(redirect, request_input, configuration)
        except PseudoIdPError as err:
            logger.error("Failed to build redirect parameters: {}".format(err))
            return self.text_response(str(err), 500)

        try:
            _uri = self.redirect_uri(redirect, request_input, configuration)
        except PseudoIdPError as err:
            logger.info("No redirect target: {}".format(err))
            return self.text_response("No redirect_uri present {}".format(err), 400)

        location = redirect_location(_uri, params, redirect.use_hash_fragment)
        self.server_get("sessions").create(request_input, params)

        logger.debug("Redirect to: {}".format(location))
        return {
            "response": location,
            "response_code": 302,
            "http_headers": [("Location", location)] + list(OAUTH2_NOCACHE_HEADERS),
            "redirect_location": location,
        }
