import json
import logging
from typing import Optional

from cryptojwt.exception import BadSyntax
from cryptojwt.utils import as_bytes
from cryptojwt.utils import as_unicode
from cryptojwt.utils import b64d
from cryptojwt.utils import b64e

from pseudoidp.exception import InvalidRequest

logger = logging.getLogger(__name__)


def b64encode_item(item) -> bytes:
    if isinstance(item, bytes):
        return b64e(item)
    return b64e(json.dumps(item, separators=(",", ":")).encode("utf-8"))


class CompactToken(object):
    """
    A JWS in compact serialization, kept as its three parts so the
    signature can be dropped before serializing.

    :param header: JOSE header
    :param payload: Claim set
    :param signature: Raw signature bytes
    """

    def __init__(self, header: dict, payload: dict, signature: Optional[bytes] = b""):
        self.header = header
        self.payload = payload
        self.signature = signature or b""

    def signing_input(self) -> bytes:
        return b".".join([b64encode_item(self.header), b64encode_item(self.payload)])

    def sign(self, signer):
        """
        :param signer: Callable taking the signing input and returning the
            signature bytes
        """
        self.signature = signer(self.signing_input())
        return self

    def remove_signature(self):
        self.signature = b""
        return self

    def serialize(self) -> str:
        _sig = b64e(self.signature) if self.signature else b""
        return as_unicode(b".".join([self.signing_input(), _sig]))

    def __str__(self):
        return self.serialize()

    @classmethod
    def parse(cls, token: str) -> "CompactToken":
        parts = as_bytes(token).split(b".")
        if len(parts) != 3:
            raise InvalidRequest("wrong number of parts in token: {}".format(len(parts)))
        try:
            header = json.loads(as_unicode(b64d(parts[0])))
            payload = json.loads(as_unicode(b64d(parts[1])))
            signature = b64d(parts[2]) if parts[2] else b""
        except (BadSyntax, ValueError) as err:
            raise InvalidRequest("malformed token: {}".format(err))
        return cls(header, payload, signature)
