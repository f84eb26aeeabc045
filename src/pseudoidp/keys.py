"""Signing keys for the IdP"""
import json
import logging
import threading
from typing import Dict
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptojwt.jwk.ec import new_ec_key
from cryptojwt.jwk.rsa import new_rsa_key
from cryptojwt.jws.jws import SIGNER_ALGS

from pseudoidp.exception import KeyGenerationError
from pseudoidp.exception import UnsupportedAlgorithm

logger = logging.getLogger(__name__)

RSA_KEY_SIZE = 2048

RSA_FAMILY = "RSA"

EC_CURVES = {"ES256": "P-256", "ES384": "P-384", "ES512": "P-521"}

KEY_FAMILIES = [RSA_FAMILY] + list(EC_CURVES.keys())

# Signing algorithm to key family. HS256 and none are backed by the RSA key.
ALG2FAMILY = {
    "RS256": RSA_FAMILY,
    "RS384": RSA_FAMILY,
    "RS512": RSA_FAMILY,
    "HS256": RSA_FAMILY,
    "none": RSA_FAMILY,
    "ES256": "ES256",
    "ES384": "ES384",
    "ES512": "ES512",
}

KID_PREFIX = "pseudoidp"


def family_kid(family: str) -> str:
    if family == RSA_FAMILY:
        return "{}-rsa".format(KID_PREFIX)
    return "{}-ecdsa-{}".format(KID_PREFIX, EC_CURVES[family])


class NoneSigner(object):
    """Signer for the none algorithm, it produces an empty signature."""

    def sign(self, msg, key):
        return b""

    def verify(self, msg, sig, key):
        return sig == b""


class SigningKey(object):
    """A private key and its JWK representation."""

    def __init__(self, family: str, jwk):
        self.family = family
        self.jwk = jwk

    @property
    def kid(self) -> str:
        return self.jwk.kid

    def private_key(self):
        return self.jwk.private_key()

    def public_key(self):
        return self.jwk.public_key()

    def public_jwk(self) -> dict:
        return self.jwk.serialize(private=False)

    def public_pem(self) -> bytes:
        """SubjectPublicKeyInfo bytes in a PEM block labelled RSA PUBLIC KEY."""
        _pem = self.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return _pem.replace(b" PUBLIC KEY-----", b" RSA PUBLIC KEY-----")


def make_rsa_key(key_size: int = RSA_KEY_SIZE) -> SigningKey:
    _key = new_rsa_key(key_size=key_size, kid=family_kid(RSA_FAMILY), use="sig")
    _key.alg = "RS256"
    return SigningKey(RSA_FAMILY, _key)


def make_ec_key(family: str) -> SigningKey:
    _key = new_ec_key(EC_CURVES[family], kid=family_kid(family), use="sig")
    _key.alg = family
    return SigningKey(family, _key)


class KeyManager(object):
    """
    Holds two disjoint key sets with the same layout. The correct set is
    published in the JWKS document, the wrong set is only used to sign
    tokens that must fail verification.

    Keys are generated once by :py:meth:`initialize` and never change.
    """

    def __init__(self, rsa_key_size: Optional[int] = RSA_KEY_SIZE):
        self.rsa_key_size = rsa_key_size
        self._keys = {}
        self._wrong_keys = {}
        self._lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _generate(self) -> Dict[str, SigningKey]:
        _keys = {RSA_FAMILY: make_rsa_key(self.rsa_key_size)}
        for family in EC_CURVES:
            _keys[family] = make_ec_key(family)
        return _keys

    def initialize(self):
        with self._lock:
            if self._initialized:
                return
            try:
                keys = self._generate()
                wrong_keys = self._generate()
            except Exception as err:
                logger.error("Failed to generate signing keys: {}".format(err))
                raise KeyGenerationError(str(err)) from err

            self._keys = keys
            self._wrong_keys = wrong_keys
            self._initialized = True
        logger.info("Signing keys generated for {}".format(", ".join(KEY_FAMILIES)))

    def lookup(self, family: str, use_wrong: Optional[bool] = False) -> Optional[SigningKey]:
        self.initialize()
        if use_wrong:
            return self._wrong_keys.get(family)
        return self._keys.get(family)

    def public_key_set(self) -> dict:
        self.initialize()
        return {"keys": [self._keys[family].public_jwk() for family in KEY_FAMILIES]}

    def public_key_set_json(self) -> str:
        return json.dumps(self.public_key_set(), indent=2)

    def signing_key(self, alg: str, use_wrong: Optional[bool] = False) -> SigningKey:
        try:
            family = ALG2FAMILY[alg]
        except KeyError:
            raise UnsupportedAlgorithm("specified algorithm {!r} not supported".format(alg))
        return self.lookup(family, use_wrong)

    def header(self, alg: str, use_wrong: Optional[bool] = False) -> dict:
        """JOSE header for a token signed with alg."""
        _header = {"alg": alg, "typ": "JWT"}
        if alg in ["HS256", "none"]:
            return _header
        _header["kid"] = self.signing_key(alg, use_wrong).kid
        return _header

    def sign(self, alg: str, message: bytes, use_wrong: Optional[bool] = False) -> bytes:
        """
        Sign message with the key that belongs to alg.

        HS256 uses the PEM encoded RSA public key as the HMAC secret, the
        key confusion a verifier should reject. none returns an empty
        signature.

        :param alg: Signing algorithm
        :param message: The JWS signing input
        :param use_wrong: Sign with the key set that is not published
        :return: signature bytes
        """
        signing_key = self.signing_key(alg, use_wrong)

        if alg == "none":
            return NoneSigner().sign(message, None)
        elif alg == "HS256":
            return SIGNER_ALGS[alg].sign(message, signing_key.public_pem())

        return SIGNER_ALGS[alg].sign(message, signing_key.private_key())
