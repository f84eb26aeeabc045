import copy
import logging
import secrets
import time
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from pseudoidp.admin import ConfigEndpoint
from pseudoidp.configure import SERVER_DEFAULT_CONFIG
from pseudoidp.configure import SIGNED_ID_TOKEN_KEY
from pseudoidp.configure import Configuration
from pseudoidp.configure import ConfigurationStore
from pseudoidp.custom import CustomEvaluatorRegistry
from pseudoidp.endpoint import Endpoint
from pseudoidp.exception import SessionNotFound
from pseudoidp.keys import KeyManager
from pseudoidp.oidc.authorization import Authorization
from pseudoidp.oidc.jwks import JWKS
from pseudoidp.oidc.provider_config import ProviderConfiguration
from pseudoidp.oidc.token import Token
from pseudoidp.oidc.userinfo import UserInfo
from pseudoidp.parameter import ParameterResolver
from pseudoidp.session import RequestInput
from pseudoidp.session import SessionStore
from pseudoidp.template_handler import Jinja2TemplateHandler
from pseudoidp.token.id_token import IDTokenBuilder
from pseudoidp.utils import first_value

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "provider_config": ProviderConfiguration,
    "jwks": JWKS,
    "authorization": Authorization,
    "token": Token,
    "userinfo": UserInfo,
    "config": ConfigEndpoint,
}


def do_endpoints(server_get: Callable, **kwargs) -> Dict[str, Endpoint]:
    return {name: cls(server_get, **kwargs) for name, cls in ENDPOINTS.items()}


def load_idp_configuration(spec) -> Optional[Configuration]:
    """
    :param spec: None, a configuration dictionary or the name of a YAML or
        JSON file
    :return: Configuration instance or None if nothing is specified
    """
    if not spec:
        return None
    if isinstance(spec, dict):
        return Configuration.from_dict(spec)
    return Configuration.from_file(spec)


class Server(object):
    """
    Owns the IdP state: signing keys, custom evaluators, the live
    configuration, sessions and the endpoints.

    :param conf: Server settings, see SERVER_DEFAULT_CONFIG
    :param configuration: Initial IdP configuration, overrides
        ``conf["idp_config"]``. Defaults to the built in configuration.
    :param key_manager: Signing keys, generated here if not given
    :param rand_bytes: Source of random bytes for random parameters
    :param sleep: Used by the block action
    """

    def __init__(
        self,
        conf: Optional[dict] = None,
        configuration: Optional[Configuration] = None,
        key_manager: Optional[KeyManager] = None,
        rand_bytes: Callable[[int], bytes] = secrets.token_bytes,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.conf = copy.deepcopy(SERVER_DEFAULT_CONFIG)
        if conf:
            self.conf.update(conf)

        if configuration is None:
            configuration = load_idp_configuration(self.conf.get("idp_config"))

        self.configuration_store = ConfigurationStore(configuration)
        self.sessions = SessionStore()
        self.registry = CustomEvaluatorRegistry()
        self.template_handler = Jinja2TemplateHandler()
        self.resolver = ParameterResolver(
            self.template_handler,
            self.registry,
            config_get=self.configuration_store.snapshot,
            rand_bytes=rand_bytes,
        )

        # Failing to generate keys is fatal
        self.key_manager = key_manager or KeyManager()
        self.key_manager.initialize()

        self.id_token = IDTokenBuilder(self.resolver, self.key_manager)
        self.registry.register(SIGNED_ID_TOKEN_KEY, self.id_token)

        self.endpoint = do_endpoints(
            self.server_get, block_timeout=self.conf["block_timeout"], sleep=sleep
        )

    def server_get(self, what, *arg):
        _func = getattr(self, "get_{}".format(what), None)
        if _func:
            return _func(*arg)
        return None

    def get_endpoints(self, *arg):
        return self.endpoint

    def get_endpoint(self, endpoint_name, *arg):
        try:
            return self.endpoint[endpoint_name]
        except KeyError:
            return None

    def get_configuration(self, *arg) -> Configuration:
        return self.configuration_store.snapshot()

    def get_configuration_store(self, *arg) -> ConfigurationStore:
        return self.configuration_store

    def get_resolver(self, *arg) -> ParameterResolver:
        return self.resolver

    def get_sessions(self, *arg) -> SessionStore:
        return self.sessions

    def get_key_manager(self, *arg) -> KeyManager:
        return self.key_manager

    def get_registry(self, *arg) -> CustomEvaluatorRegistry:
        return self.registry

    def register_custom(self, key: str, func: Callable):
        """Bind a custom evaluator usable from the configuration."""
        self.registry.register(key, func)

    def request_input(
        self,
        method: Optional[str] = "GET",
        path: Optional[str] = "",
        domain: Optional[str] = "",
        proto: Optional[str] = "",
        headers: Optional[Dict[str, str]] = None,
        url_params: Optional[Dict[str, List[str]]] = None,
        form_params: Optional[Dict[str, List[str]]] = None,
    ) -> RequestInput:
        """
        Build the request context. If the request carries a code the
        matching session is attached, an unknown code is logged and the
        request goes on without a session.
        """
        url_params = url_params or {}
        form_params = form_params or {}

        session = None
        code = first_value(form_params, "code") or first_value(url_params, "code")
        if code:
            try:
                session = self.sessions.lookup(code)
            except SessionNotFound as err:
                logger.warning("unexpected code: {}".format(err))

        return RequestInput(
            domain=domain,
            method=method,
            path=path,
            proto=proto,
            headers=headers,
            url_params=url_params,
            form_params=form_params,
            session=session,
        )
