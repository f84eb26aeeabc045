"""Parameter evaluation against request input"""
import enum
import json
import logging
import re
import secrets
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from pseudoidp import rndstr
from pseudoidp.exception import ConfigurationError
from pseudoidp.exception import TypeCoercionError
from pseudoidp.item import ConfigItem
from pseudoidp.item import to_enum
from pseudoidp.session import RequestInput

logger = logging.getLogger(__name__)

TRUE_STRINGS = ["1", "t", "T", "TRUE", "true", "True"]
FALSE_STRINGS = ["0", "f", "F", "FALSE", "false", "False"]
NUMBER_PATTERN = re.compile(r"[+-]?[0-9]+")

# numbers are 64 bit signed integers
MIN_NUMBER = -(2 ** 63)
MAX_NUMBER = 2 ** 63 - 1


class ParameterAction(enum.Enum):
    PASSTHROUGH = "passthrough"
    SET = "set"
    OMIT = "omit"
    RANDOM = "random"
    CUSTOM = "custom"


class Parameter(ConfigItem):
    """
    An output parameter of an endpoint. `values` is only used by the set
    action, `custom_key` only by the custom action.
    """

    name = "parameter"
    parameter = {"id": "", "action": "", "values": [], "custom_key": "", "json_type": ""}
    enums = {"action": (ParameterAction, "parameter action", None)}

    def __init__(
        self,
        id: Optional[str] = "",
        action: Optional[Any] = ParameterAction.PASSTHROUGH,
        values: Optional[List[str]] = None,
        custom_key: Optional[str] = "",
        json_type: Optional[str] = "string",
    ):
        ConfigItem.__init__(self)
        self.id = id
        self.action = to_enum(ParameterAction, action, "parameter action")
        self.values = list(values or [])
        self.custom_key = custom_key or ""
        self.json_type = json_type or "string"

    def verify(self):
        if not self.id:
            raise ConfigurationError("{} id is missing".format(self.name))

    def __repr__(self):
        return "Parameter(id={!r}, action={})".format(self.id, self.action.value)


class Claim(ConfigItem):
    """An ID Token claim. Values are templates, as for a set Parameter."""

    name = "claim"
    parameter = {"id": "", "values": [], "json_type": ""}

    def __init__(
        self, id: Optional[str] = "", values: Optional[List[str]] = None, json_type: Optional[str] = "string"
    ):
        ConfigItem.__init__(self)
        self.id = id
        self.values = list(values or [])
        self.json_type = json_type or "string"

    def verify(self):
        if not self.id:
            raise ConfigurationError("{} id is missing".format(self.name))

    def as_parameter(self) -> Parameter:
        return Parameter(
            id=self.id, action=ParameterAction.SET, values=self.values, json_type=self.json_type
        )


def coerce_json(values: List[str], json_type: str) -> Any:
    """
    Interpret resolved values as a JSON value.

    :param values: Resolved values
    :param json_type: One of string, array, number, boolean, object. Anything
        else is treated as string.
    :return: The JSON value. None if there are no values, or for an object
        given as null.
    """
    if not values:
        return None

    if json_type == "array":
        return list(values)
    elif json_type == "number":
        if not NUMBER_PATTERN.fullmatch(values[0]):
            raise TypeCoercionError("failed to parse {!r} as a number".format(values[0]))
        _num = int(values[0])
        if not MIN_NUMBER <= _num <= MAX_NUMBER:
            raise TypeCoercionError("{!r} is out of range for a number".format(values[0]))
        return _num
    elif json_type == "boolean":
        if values[0] in TRUE_STRINGS:
            return True
        if values[0] in FALSE_STRINGS:
            return False
        raise TypeCoercionError("failed to parse {!r} as a boolean".format(values[0]))
    elif json_type == "object":
        try:
            obj = json.loads(values[0])
        except ValueError as err:
            raise TypeCoercionError(
                "failed to parse {!r} as a JSON Object: {}".format(values[0], err)
            )
        # null is accepted and stays null
        if obj is not None and not isinstance(obj, dict):
            raise TypeCoercionError("failed to parse {!r} as a JSON Object".format(values[0]))
        return obj

    return values[0]


class ParameterResolver(object):
    """
    Evaluates Parameters against a RequestInput.

    :param template_handler: Renders set action templates
    :param registry: CustomEvaluatorRegistry used by the custom action
    :param config_get: Callable returning a snapshot of the live
        configuration, passed on to custom evaluators
    :param rand_bytes: Source of random bytes for the random action
    """

    def __init__(
        self,
        template_handler,
        registry,
        config_get: Optional[Callable] = None,
        rand_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self.template_handler = template_handler
        self.registry = registry
        self.config_get = config_get
        self.rand_bytes = rand_bytes

    def resolve(
        self,
        parameter: Parameter,
        request_input: RequestInput,
        configuration: Optional[Any] = None,
    ) -> List[str]:
        """
        :param parameter: The parameter to evaluate
        :param request_input: The request
        :param configuration: Configuration handed to custom evaluators. If
            not given a fresh snapshot is used.
        :return: list of values, possibly empty
        """
        action = parameter.action
        if action is ParameterAction.PASSTHROUGH:
            return request_input.get_param(parameter.id)
        elif action is ParameterAction.SET:
            return self.render_values(parameter.values, request_input)
        elif action is ParameterAction.OMIT:
            return []
        elif action is ParameterAction.RANDOM:
            return [rndstr(self.rand_bytes)]
        elif action is ParameterAction.CUSTOM:
            _config = configuration
            if _config is None and self.config_get:
                _config = self.config_get()
            logger.debug("Custom value for {!r} using {!r}".format(parameter.id, parameter.custom_key))
            return list(self.registry.invoke(parameter.custom_key, request_input, _config))

        raise ConfigurationError("unhandled parameter action {!r}".format(action))

    def resolve_json(
        self,
        parameter: Parameter,
        request_input: RequestInput,
        configuration: Optional[Any] = None,
    ) -> Any:
        return coerce_json(
            self.resolve(parameter, request_input, configuration), parameter.json_type
        )

    def resolve_all(
        self,
        parameters: List[Parameter],
        request_input: RequestInput,
        configuration: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Resolve a list of parameters into a JSON object. Parameters that
        resolve to nothing are left out. The first error aborts.
        """
        content = {}
        for parameter in parameters:
            _vals = self.resolve(parameter, request_input, configuration)
            if _vals:
                content[parameter.id] = coerce_json(_vals, parameter.json_type)
        return content

    def render_values(self, templates: List[str], request_input: RequestInput) -> List[str]:
        _context = request_input.template_context()
        res = []
        for template in templates:
            _val = self.template_handler.render(template, **_context)
            if _val != "":
                res.append(_val)
        return res

    @staticmethod
    def default_value(id: str, action: Any, request_input: RequestInput) -> List[str]:
        """
        Value for a request parameter that has no configuration entry.
        Only passthrough produces values.
        """
        if not isinstance(action, ParameterAction):
            try:
                action = ParameterAction(action)
            except ValueError:
                return []

        if action is ParameterAction.PASSTHROUGH:
            return request_input.get_param(id)
        return []
