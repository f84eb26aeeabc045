import copy
import json

import pytest

from pseudoidp.configure import DEFAULT_CONFIG
from pseudoidp.configure import Configuration
from pseudoidp.keys import KeyManager
from pseudoidp.server import Server
from pseudoidp.session import RequestInput

KEY_MANAGER = KeyManager()

CSRF_HEADERS = {
    "X-Pseudo-IDP-CSRF-Protection": "1",
    "Content-Type": "application/json",
    "Origin": "https://idp.example.com",
}


def new_config():
    _conf = copy.deepcopy(DEFAULT_CONFIG)
    _conf["id_token_config"]["alg"] = "ES256"
    _conf["id_token_config"]["use_wrong_key"] = True
    return _conf


class TestConfigEndpoint(object):
    @pytest.fixture(autouse=True)
    def create_endpoint(self):
        self.server = Server(key_manager=KEY_MANAGER)
        self.endpoint = self.server.server_get("endpoint", "config")

    def request(self, method, headers=None, body=""):
        _input = RequestInput(
            domain="idp.example.com",
            method=method,
            path="/config",
            headers=CSRF_HEADERS if headers is None else headers,
        )
        return self.endpoint.process_request(_input, body=body)

    def test_get(self):
        info = self.request("GET", headers={})
        assert info["response_code"] == 200
        assert json.loads(info["response"]) == Configuration.default().dump()

    def test_post(self):
        info = self.request("POST", body=json.dumps(new_config()))
        assert info["response_code"] == 200
        assert json.loads(info["response"])["id_token_config"]["alg"] == "ES256"

        _live = self.server.server_get("configuration")
        assert _live.id_token_config.alg == "ES256"
        assert _live.id_token_config.use_wrong_key is True

    def test_post_lowercase_headers(self):
        _headers = {k.lower(): v for k, v in CSRF_HEADERS.items()}
        info = self.request("POST", headers=_headers, body=json.dumps(new_config()))
        assert info["response_code"] == 200

    def test_delete(self):
        self.request("POST", body=json.dumps(new_config()))
        info = self.request("DELETE")
        assert info["response_code"] == 200
        assert self.server.server_get("configuration").id_token_config.alg == "RS256"

    @pytest.mark.parametrize(
        "header,value",
        [
            ("X-Pseudo-IDP-CSRF-Protection", "0"),
            ("X-Pseudo-IDP-CSRF-Protection", None),
            ("Content-Type", "text/plain"),
            ("Content-Type", "application/x-www-form-urlencoded"),
            ("Origin", "https://evil.example.com"),
            ("Origin", "idp.example.com"),
            ("Origin", None),
        ],
    )
    def test_csrf(self, header, value):
        _headers = dict(CSRF_HEADERS)
        if value is None:
            del _headers[header]
        else:
            _headers[header] = value

        for method in ["POST", "DELETE"]:
            info = self.request(method, headers=_headers, body=json.dumps(new_config()))
            assert info["response_code"] == 400
        assert self.server.server_get("configuration").id_token_config.alg == "RS256"

    def test_no_host(self):
        _input = RequestInput(method="DELETE", headers=CSRF_HEADERS)
        info = self.endpoint.process_request(_input)
        assert info["response_code"] == 400

    @pytest.mark.parametrize(
        "body",
        [
            "",
            "{",
            "[]",
            json.dumps({"token_action": {"action_type": "redirect"}}),
            json.dumps({"auth_action": {"redirect": {"parameters": [{"id": "a", "action": "x"}]}}}),
        ],
    )
    def test_invalid_config(self, body):
        info = self.request("POST", body=body)
        assert info["response_code"] == 400
        assert self.server.server_get("configuration").dump() == (
            Configuration.default().dump()
        )
