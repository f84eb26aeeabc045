import datetime

from jinja2 import StrictUndefined
from jinja2 import TemplateError as Jinja2TemplateError
from jinja2.sandbox import SandboxedEnvironment

from pseudoidp.exception import TemplateError


def unix(value: datetime.datetime) -> int:
    return int(value.timestamp())


def add_days(value: datetime.datetime, days: int) -> datetime.datetime:
    return value + datetime.timedelta(days=days)


def add_seconds(value: datetime.datetime, seconds: int) -> datetime.datetime:
    return value + datetime.timedelta(seconds=seconds)


class TemplateHandler(object):
    def __init__(self):
        pass

    def render(self, template, **kwargs):
        raise NotImplementedError()


class Jinja2TemplateHandler(TemplateHandler):
    """
    Renders template strings from the configuration.

    Templates see the request context as top level variables, for instance
    ``https://{{ domain }}/oauth2/auth`` or
    ``{% if session %}{{ session.client_id }}{% endif %}``. Expiry
    arithmetic is done with filters: ``{{ time | add_days(1) | unix }}``.
    """

    def __init__(self, template_env=None):
        if template_env is None:
            template_env = SandboxedEnvironment(undefined=StrictUndefined)
        template_env.filters.update(
            {"unix": unix, "add_days": add_days, "add_seconds": add_seconds}
        )
        self.template_env = template_env

    def render(self, template, **kwargs):
        try:
            _template = self.template_env.from_string(template)
            return _template.render(**kwargs)
        except (Jinja2TemplateError, TypeError, ValueError) as err:
            raise TemplateError("failed to render template {!r}: {}".format(template, err))
