import logging
from typing import List

from pseudoidp.configure import Configuration
from pseudoidp.keys import KeyManager
from pseudoidp.parameter import ParameterResolver
from pseudoidp.session import RequestInput

from . import CompactToken

logger = logging.getLogger(__name__)


class IDTokenBuilder(object):
    """
    Builds ID Tokens from the claims in the id_token_config section of the
    configuration. An instance is registered as a custom evaluator, so an
    endpoint parameter can carry a freshly signed token.
    """

    def __init__(self, resolver: ParameterResolver, key_manager: KeyManager):
        self.resolver = resolver
        self.key_manager = key_manager

    def payload(self, request_input: RequestInput, configuration: Configuration) -> dict:
        _claims = [c.as_parameter() for c in configuration.id_token_config.claims]
        return self.resolver.resolve_all(_claims, request_input, configuration)

    def build(self, request_input: RequestInput, configuration: Configuration) -> str:
        """
        Create a signed token.

        :param request_input: The request the token is made for
        :param configuration: Configuration snapshot
        :return: The token in compact serialization
        """
        _conf = configuration.id_token_config
        _alg = _conf.alg
        _wrong = _conf.use_wrong_key

        # Unsupported algorithms are caught before any claim is evaluated
        self.key_manager.signing_key(_alg, _wrong)

        token = CompactToken(
            self.key_manager.header(_alg, _wrong), self.payload(request_input, configuration)
        )
        token.sign(lambda msg: self.key_manager.sign(_alg, msg, _wrong))
        if _conf.remove_signature:
            token.remove_signature()

        logger.debug(
            "ID Token signed with {} (wrong key: {}, signature removed: {})".format(
                _alg, _wrong, _conf.remove_signature
            )
        )
        return token.serialize()

    def __call__(self, request_input: RequestInput, configuration: Configuration) -> List[str]:
        return [self.build(request_input, configuration)]
