import logging

from flask import Blueprint
from flask import current_app
from flask import redirect
from flask import request
from flask.helpers import make_response

from pseudoidp.session import RequestInput

logger = logging.getLogger(__name__)

pseudoidp_views = Blueprint("pseudoidp", __name__, url_prefix="")


def do_response(info: dict):
    logger.debug("do_response: {}".format(info))

    if "redirect_location" in info:
        logger.info("Redirect to: {}".format(info["redirect_location"]))
        resp = redirect(info["redirect_location"], info.get("response_code", 302))
    else:
        resp = make_response(info["response"], info.get("response_code", 200))

    for key, value in info.get("http_headers", []):
        resp.headers[key] = value

    return resp


def request_input() -> RequestInput:
    if request.form:
        form_params = request.form.to_dict(flat=False)
    else:
        form_params = {}

    return current_app.server.request_input(
        method=request.method,
        path=request.path,
        domain=request.host,
        proto=request.headers.get("X-Forwarded-Proto", ""),
        headers=dict(request.headers.items()),
        url_params=request.args.to_dict(flat=False),
        form_params=form_params,
    )


def service_endpoint(name: str):
    endpoint = current_app.server.server_get("endpoint", name)
    logger.info('At the "{}" endpoint'.format(endpoint.name))

    return do_response(endpoint.process_request(request_input()))


@pseudoidp_views.route("/.well-known/openid-configuration")
def provider_config():
    return service_endpoint("provider_config")


@pseudoidp_views.route("/.well-known/jwks.json")
def jwks():
    return service_endpoint("jwks")


@pseudoidp_views.route("/oauth2/auth", methods=["GET", "POST"])
def authorization():
    return service_endpoint("authorization")


@pseudoidp_views.route("/oauth2/token", methods=["GET", "POST"])
def token():
    return service_endpoint("token")


@pseudoidp_views.route("/oauth2/userinfo", methods=["GET", "POST"])
def userinfo():
    return service_endpoint("userinfo")


@pseudoidp_views.route("/config", methods=["GET", "POST", "DELETE"])
def config():
    endpoint = current_app.server.server_get("endpoint", "config")
    body = request.get_data(as_text=True)
    info = endpoint.process_request(request_input(), body=body)
    return do_response(info)
