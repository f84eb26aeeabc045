import json

import pytest
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.hazmat.primitives.serialization import PublicFormat
from cryptojwt.exception import BadSignature
from cryptojwt.jwk.jwk import key_from_jwk_dict
from cryptojwt.jws.jws import SIGNER_ALGS

from pseudoidp.exception import KeyGenerationError
from pseudoidp.exception import UnsupportedAlgorithm
from pseudoidp.keys import KEY_FAMILIES
from pseudoidp.keys import KeyManager
from pseudoidp.keys import NoneSigner

KEY_MANAGER = KeyManager()

MSG = b"eyJhbGciOiJSUzI1NiJ9.eyJzdWIiOiIxMjM0NWFiY2RlIn0"


def published_key(kid):
    for _jwk in KEY_MANAGER.public_key_set()["keys"]:
        if _jwk["kid"] == kid:
            return key_from_jwk_dict(_jwk)
    return None


class TestKeyManager(object):
    @pytest.fixture(autouse=True)
    def create_keys(self):
        KEY_MANAGER.initialize()
        self.key_manager = KEY_MANAGER

    def test_initialize_once(self):
        _rsa = self.key_manager.lookup("RSA")
        self.key_manager.initialize()
        assert self.key_manager.initialized
        assert self.key_manager.lookup("RSA") is _rsa

    def test_lookup(self):
        for family in KEY_FAMILIES:
            _key = self.key_manager.lookup(family)
            _wrong = self.key_manager.lookup(family, use_wrong=True)
            assert _key.family == family
            assert _key.kid == _wrong.kid
            assert _key.public_jwk() != _wrong.public_jwk()

        assert self.key_manager.lookup("DSA") is None
        assert self.key_manager.lookup("DSA", use_wrong=True) is None

    def test_kids(self):
        assert self.key_manager.lookup("RSA").kid == "pseudoidp-rsa"
        assert self.key_manager.lookup("ES256").kid == "pseudoidp-ecdsa-P-256"
        assert self.key_manager.lookup("ES384").kid == "pseudoidp-ecdsa-P-384"
        assert self.key_manager.lookup("ES512").kid == "pseudoidp-ecdsa-P-521"

    def test_public_key_set(self):
        jwks = self.key_manager.public_key_set()
        assert len(jwks["keys"]) == 4
        assert [k["kid"] for k in jwks["keys"]] == [
            "pseudoidp-rsa",
            "pseudoidp-ecdsa-P-256",
            "pseudoidp-ecdsa-P-384",
            "pseudoidp-ecdsa-P-521",
        ]
        for _jwk in jwks["keys"]:
            assert "d" not in _jwk
            assert "p" not in _jwk
            assert _jwk["use"] == "sig"

        assert jwks["keys"][0]["kty"] == "RSA"
        assert jwks["keys"][0]["alg"] == "RS256"
        assert jwks["keys"][1]["crv"] == "P-256"
        assert jwks["keys"][3]["alg"] == "ES512"

        assert json.loads(self.key_manager.public_key_set_json()) == jwks

    def test_wrong_keys_not_published(self):
        jwks = self.key_manager.public_key_set()
        for family in KEY_FAMILIES:
            _wrong = self.key_manager.lookup(family, use_wrong=True).public_jwk()
            assert _wrong not in jwks["keys"]

    @pytest.mark.parametrize("alg", ["RS256", "RS384", "RS512", "ES256", "ES384", "ES512"])
    def test_sign_verify(self, alg):
        sig = self.key_manager.sign(alg, MSG)
        _key = published_key(self.key_manager.header(alg)["kid"])
        assert SIGNER_ALGS[alg].verify(MSG, sig, _key.public_key())

    @pytest.mark.parametrize("alg", ["RS256", "ES384"])
    def test_sign_wrong_key(self, alg):
        sig = self.key_manager.sign(alg, MSG, use_wrong=True)
        _key = published_key(self.key_manager.header(alg)["kid"])
        with pytest.raises(BadSignature):
            SIGNER_ALGS[alg].verify(MSG, sig, _key.public_key())

        _wrong = self.key_manager.signing_key(alg, use_wrong=True)
        assert SIGNER_ALGS[alg].verify(MSG, sig, _wrong.public_key())

    def test_hs256_uses_public_key(self):
        sig = self.key_manager.sign("HS256", MSG)
        _pem = self.key_manager.lookup("RSA").public_pem()
        assert _pem.startswith(b"-----BEGIN RSA PUBLIC KEY-----\n")
        assert _pem.endswith(b"-----END RSA PUBLIC KEY-----\n")
        assert SIGNER_ALGS["HS256"].verify(MSG, sig, _pem)

        # a client can rebuild the secret from the published key
        _key = published_key("pseudoidp-rsa")
        _published_pem = _key.public_key().public_bytes(
            encoding=Encoding.PEM, format=PublicFormat.SubjectPublicKeyInfo
        ).replace(b" PUBLIC KEY-----", b" RSA PUBLIC KEY-----")
        assert _published_pem == _pem
        assert sig == SIGNER_ALGS["HS256"].sign(MSG, _published_pem)

    def test_none(self):
        assert self.key_manager.sign("none", MSG) == b""
        assert NoneSigner().verify(MSG, b"", None)

    def test_headers(self):
        assert self.key_manager.header("RS512") == {
            "alg": "RS512",
            "typ": "JWT",
            "kid": "pseudoidp-rsa",
        }
        assert self.key_manager.header("ES256")["kid"] == "pseudoidp-ecdsa-P-256"
        assert "kid" not in self.key_manager.header("HS256")
        assert "kid" not in self.key_manager.header("none")

    @pytest.mark.parametrize("alg", ["PS256", "HS512", "", "rs256"])
    def test_unsupported(self, alg):
        with pytest.raises(UnsupportedAlgorithm):
            self.key_manager.sign(alg, MSG)


def test_key_generation_failure():
    key_manager = KeyManager(rsa_key_size=-1)
    with pytest.raises(KeyGenerationError):
        key_manager.initialize()
    assert not key_manager.initialized
