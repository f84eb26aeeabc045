import logging
from typing import Optional

from pseudoidp.configure import Configuration
from pseudoidp.endpoint import Endpoint
from pseudoidp.exception import KeyGenerationError
from pseudoidp.session import RequestInput

logger = logging.getLogger(__name__)


class JWKS(Endpoint):
    """Publishes the public halves of the correct signing keys."""

    name = "jwks"
    endpoint_path = ".well-known/jwks.json"
    methods = ["GET"]

    def process_request(
        self, request_input: RequestInput, configuration: Optional[Configuration] = None
    ) -> dict:
        logger.info("{} {} at the 'jwks' endpoint".format(request_input.method, request_input.path))
        try:
            _jwks = self.server_get("key_manager").public_key_set_json()
        except KeyGenerationError as err:
            logger.error("Failed to get key set: {}".format(err))
            return self.text_response("Failed to get key set {}".format(err), 500)

        return {
            "response": _jwks,
            "response_code": 200,
            "http_headers": [("Content-type", "application/json; charset=utf-8")],
        }
