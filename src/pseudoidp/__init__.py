import base64
import secrets

__version__ = "1.0.0"

RANDOM_VALUE_BYTES = 32

JSON_ENCODED = "application/json"


def rndstr(rand_bytes=secrets.token_bytes, size=RANDOM_VALUE_BYTES):
    """
    Returns a URL safe base64 encoded string of random bytes.

    :param rand_bytes: Callable returning `size` random bytes
    :param size: Number of random bytes to encode
    :return: string
    """
    return base64.urlsafe_b64encode(rand_bytes(size)).decode("ascii")
