"""Configuration management for the IdP"""
import copy
import enum
import logging
import threading
from typing import List
from typing import Optional

from pseudoidp.exception import ConfigurationError
from pseudoidp.item import ConfigItem
from pseudoidp.parameter import Claim
from pseudoidp.parameter import Parameter
from pseudoidp.parameter import ParameterAction
from pseudoidp.utils import load_config_file

logger = logging.getLogger(__name__)

SIGNED_ID_TOKEN_KEY = "signed_token_id"

# Acts as a default OIDC IdP using the authorization code flow and returning
# a static subject in the ID Token.
DEFAULT_CONFIG = {
    "auth_action": {
        "action_type": "redirect",
        "redirect": {
            "redirect_target": {"use_custom_redirect_uri": False, "target": "", "custom_key": ""},
            "default_parameter_action": "passthrough",
            "parameters": [
                {"id": "code", "action": "random", "json_type": "string"},
                {"id": "redirect_uri", "action": "omit", "json_type": "string"},
            ],
            "use_hash_fragment": False,
        },
    },
    "token_action": {
        "action_type": "respond",
        "respond": {
            "parameters": [
                {
                    "id": "id_token",
                    "action": "custom",
                    "custom_key": SIGNED_ID_TOKEN_KEY,
                    "json_type": "string",
                },
                {"id": "access_token", "action": "random", "json_type": "string"},
                {"id": "refresh_token", "action": "random", "json_type": "string"},
                {"id": "expires_in", "action": "set", "values": ["3600"], "json_type": "number"},
                {"id": "token_type", "action": "set", "values": ["Bearer"], "json_type": "string"},
            ]
        },
    },
    "userinfo_action": {
        "action_type": "respond",
        "respond": {
            "parameters": [
                {"id": "sub", "action": "set", "values": ["12345abcde"], "json_type": "string"},
                {
                    "id": "email",
                    "action": "set",
                    "values": ["testsub@{{ domain }}"],
                    "json_type": "string",
                },
            ]
        },
    },
    "discovery_action": {
        "action_type": "respond",
        "respond": {
            "parameters": [
                {"id": "issuer", "action": "set", "values": ["https://{{ domain }}"]},
                {
                    "id": "authorization_endpoint",
                    "action": "set",
                    "values": ["https://{{ domain }}/oauth2/auth"],
                },
                {
                    "id": "token_endpoint",
                    "action": "set",
                    "values": ["https://{{ domain }}/oauth2/token"],
                },
                {
                    "id": "userinfo_endpoint",
                    "action": "set",
                    "values": ["https://{{ domain }}/oauth2/userinfo"],
                },
                {
                    "id": "jwks_uri",
                    "action": "set",
                    "values": ["https://{{ domain }}/.well-known/jwks.json"],
                },
                {
                    "id": "subject_types_supported",
                    "action": "set",
                    "values": ["public"],
                    "json_type": "array",
                },
                {
                    "id": "id_token_signing_alg_values_supported",
                    "action": "set",
                    "values": ["RS256", "RS512", "ES256"],
                    "json_type": "array",
                },
                {
                    "id": "response_types_supported",
                    "action": "set",
                    "values": [
                        "code",
                        "code id_token",
                        "id_token",
                        "token id_token",
                        "token",
                        "token id_token code",
                    ],
                    "json_type": "array",
                },
            ]
        },
    },
    "id_token_config": {
        "alg": "RS256",
        "remove_signature": False,
        "use_wrong_key": False,
        "claims": [
            {"id": "iss", "values": ["https://{{ domain }}"], "json_type": "string"},
            {
                "id": "aud",
                "values": ["{% if session %}{{ session.client_id }}{% endif %}"],
                "json_type": "string",
            },
            {
                "id": "nonce",
                "values": ["{% if session %}{{ session.nonce }}{% endif %}"],
                "json_type": "string",
            },
            {"id": "iat", "values": ["{{ time | unix }}"], "json_type": "number"},
            {"id": "exp", "values": ["{{ time | add_days(1) | unix }}"], "json_type": "number"},
            {"id": "sub", "values": ["12345abcde"], "json_type": "string"},
        ],
    },
}

# Settings for the process hosting the IdP, not part of the replaceable
# configuration.
SERVER_DEFAULT_CONFIG = {
    "domain": "0.0.0.0",
    "port": 8080,
    "debug": False,
    "block_timeout": 600,
    "logging": None,
    "idp_config": None,
    "cert": "",
    "key": "",
}


class EndpointActionType(enum.Enum):
    RESPOND = "respond"
    ERROR = "error"
    BLOCK = "block"
    REDIRECT = "redirect"


class ErrorResponse(ConfigItem):
    name = "error"
    parameter = {"error_code": 0, "error_content": ""}

    def __init__(self, error_code: Optional[int] = 500, error_content: Optional[str] = ""):
        ConfigItem.__init__(self)
        self.error_code = error_code
        self.error_content = error_content

    def verify(self):
        if not 100 <= self.error_code <= 599:
            raise ConfigurationError("error_code must be an HTTP status code")


class RedirectTarget(ConfigItem):
    name = "redirect_target"
    parameter = {"use_custom_redirect_uri": bool, "target": "", "custom_key": ""}

    def __init__(
        self,
        use_custom_redirect_uri: Optional[bool] = False,
        target: Optional[str] = "",
        custom_key: Optional[str] = "",
    ):
        ConfigItem.__init__(self)
        self.use_custom_redirect_uri = use_custom_redirect_uri
        self.target = target
        self.custom_key = custom_key


class AuthRedirect(ConfigItem):
    name = "redirect"
    parameter = {
        "redirect_target": RedirectTarget,
        "default_parameter_action": "",
        "parameters": [Parameter],
        "use_hash_fragment": bool,
    }
    enums = {"default_parameter_action": (ParameterAction, "default parameter action", None)}

    def __init__(
        self,
        redirect_target: Optional[RedirectTarget] = None,
        default_parameter_action: Optional[ParameterAction] = ParameterAction.PASSTHROUGH,
        parameters: Optional[List[Parameter]] = None,
        use_hash_fragment: Optional[bool] = False,
    ):
        ConfigItem.__init__(self)
        self.redirect_target = redirect_target or RedirectTarget()
        self.default_parameter_action = default_parameter_action
        self.parameters = parameters or []
        self.use_hash_fragment = use_hash_fragment


class AuthAction(ConfigItem):
    name = "auth_action"
    parameter = {"action_type": "", "redirect": AuthRedirect, "error": ErrorResponse}
    enums = {
        "action_type": (
            EndpointActionType,
            "authorization endpoint action",
            [EndpointActionType.REDIRECT, EndpointActionType.ERROR, EndpointActionType.BLOCK],
        )
    }

    def __init__(
        self,
        action_type: Optional[EndpointActionType] = EndpointActionType.REDIRECT,
        redirect: Optional[AuthRedirect] = None,
        error: Optional[ErrorResponse] = None,
    ):
        ConfigItem.__init__(self)
        self.action_type = action_type
        self.redirect = redirect or AuthRedirect()
        self.error = error or ErrorResponse()


class Respond(ConfigItem):
    name = "respond"
    parameter = {"parameters": [Parameter]}

    def __init__(self, parameters: Optional[List[Parameter]] = None):
        ConfigItem.__init__(self)
        self.parameters = parameters or []


class RespondAction(ConfigItem):
    """Configuration of an endpoint that responds with JSON content."""

    name = "endpoint action"
    parameter = {"action_type": "", "respond": Respond, "error": ErrorResponse}
    enums = {
        "action_type": (
            EndpointActionType,
            "endpoint action",
            [EndpointActionType.RESPOND, EndpointActionType.ERROR, EndpointActionType.BLOCK],
        )
    }

    def __init__(
        self,
        action_type: Optional[EndpointActionType] = EndpointActionType.RESPOND,
        respond: Optional[Respond] = None,
        error: Optional[ErrorResponse] = None,
    ):
        ConfigItem.__init__(self)
        self.action_type = action_type
        self.respond = respond or Respond()
        self.error = error or ErrorResponse()

    @property
    def parameters(self) -> List[Parameter]:
        return self.respond.parameters


class IDTokenConfig(ConfigItem):
    name = "id_token_config"
    parameter = {"alg": "", "remove_signature": bool, "use_wrong_key": bool, "claims": [Claim]}

    def __init__(
        self,
        alg: Optional[str] = "RS256",
        remove_signature: Optional[bool] = False,
        use_wrong_key: Optional[bool] = False,
        claims: Optional[List[Claim]] = None,
    ):
        ConfigItem.__init__(self)
        self.alg = alg
        self.remove_signature = remove_signature
        self.use_wrong_key = use_wrong_key
        self.claims = claims or []


class Configuration(ConfigItem):
    """
    The complete, replaceable IdP configuration. Instances are never
    modified after loading.
    """

    name = "configuration"
    parameter = {
        "auth_action": AuthAction,
        "token_action": RespondAction,
        "userinfo_action": RespondAction,
        "discovery_action": RespondAction,
        "id_token_config": IDTokenConfig,
    }

    def __init__(
        self,
        auth_action: Optional[AuthAction] = None,
        token_action: Optional[RespondAction] = None,
        userinfo_action: Optional[RespondAction] = None,
        discovery_action: Optional[RespondAction] = None,
        id_token_config: Optional[IDTokenConfig] = None,
    ):
        ConfigItem.__init__(self)
        self.auth_action = auth_action or AuthAction()
        self.token_action = token_action or RespondAction()
        self.userinfo_action = userinfo_action or RespondAction()
        self.discovery_action = discovery_action or RespondAction()
        self.id_token_config = id_token_config or IDTokenConfig()

    @classmethod
    def from_dict(cls, conf: dict) -> "Configuration":
        return cls().load(conf)

    @classmethod
    def from_file(cls, filename: str) -> "Configuration":
        return cls.from_dict(load_config_file(filename))

    @classmethod
    def default(cls) -> "Configuration":
        return cls.from_dict(copy.deepcopy(DEFAULT_CONFIG))


class ConfigurationStore(object):
    """
    Holds the live configuration. Readers get a private copy so a
    concurrent replace is never seen half way.
    """

    def __init__(self, configuration: Optional[Configuration] = None):
        self._lock = threading.Lock()
        self._configuration = configuration or Configuration.default()

    def snapshot(self) -> Configuration:
        with self._lock:
            return copy.deepcopy(self._configuration)

    def replace(self, configuration: Configuration):
        _new = copy.deepcopy(configuration)
        with self._lock:
            self._configuration = _new
        logger.info("Configuration replaced")

    def reset(self):
        self.replace(Configuration.default())
