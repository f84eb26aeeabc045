"""Configuration items that are loaded from and dumped to plain dictionaries"""
from typing import Optional

from oidcmsg.impexp import ImpExp

from pseudoidp.exception import ConfigurationError


def to_enum(enum_cls, value, where: str, allowed=None):
    """
    Convert a configuration tag to an enum member.

    :param enum_cls: The enum class
    :param value: Member or tag value
    :param where: Used in the error message
    :param allowed: Optional subset of members that are valid here
    :return: enum member
    """
    if isinstance(value, enum_cls):
        member = value
    else:
        try:
            member = enum_cls(value)
        except ValueError:
            raise ConfigurationError("unknown {} {!r}".format(where, value))
    if allowed is not None and member not in allowed:
        raise ConfigurationError("{} {!r} is not allowed here".format(where, member.value))
    return member


def dump_enum(item, exclude_attributes=None):
    return item.value


class ConfigItem(ImpExp):
    """
    An ImpExp whose attributes are type checked after loading.

    `parameter` maps attribute names to their types as for any ImpExp.
    Attributes listed in `enums` hold enum members and are loaded from,
    and dumped as, the member values. `enums` maps the attribute name to
    a tuple of the enum class, a description used in error messages and
    the allowed members (None for all).
    """

    name = "configuration item"
    enums = {}

    def __init__(self):
        ImpExp.__init__(self)
        self.special_load_dump = {attr: {"dump": dump_enum} for attr in self.enums}

    def load(self, item: dict, init_args: Optional[dict] = None, load_args: Optional[dict] = None):
        if not isinstance(item, dict):
            raise ConfigurationError("{} must be an object".format(self.name))

        # null means the default
        _item = {k: v for k, v in item.items() if v is not None}
        for attr, cls in self.parameter.items():
            if isinstance(cls, list) and cls and attr in _item:
                if not isinstance(_item[attr], list):
                    raise ConfigurationError("{} must be a list".format(attr))

        return ImpExp.load(self, _item, init_args=init_args, load_args=load_args)

    def local_load_adjustments(self, **kwargs):
        for attr, cls in self.parameter.items():
            val = getattr(self, attr)
            if attr in self.enums:
                enum_cls, where, allowed = self.enums[attr]
                setattr(self, attr, to_enum(enum_cls, val, where, allowed))
            elif cls is bool:
                if not isinstance(val, bool):
                    raise ConfigurationError("{} must be a boolean".format(attr))
            elif cls == "":
                if not isinstance(val, str):
                    raise ConfigurationError("{} must be a string".format(attr))
            elif cls == 0:
                if isinstance(val, bool) or not isinstance(val, int):
                    raise ConfigurationError("{} must be an integer".format(attr))
            elif cls == []:
                if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
                    raise ConfigurationError("{} must be a list of strings".format(attr))

        self.verify()

    def verify(self):
        """Checks beyond the attribute types."""
        pass
