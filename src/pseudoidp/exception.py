class PseudoIdPError(Exception):
    pass


class ConfigurationError(PseudoIdPError):
    pass


class UnknownCustomKey(PseudoIdPError):
    pass


class TemplateError(PseudoIdPError):
    pass


class TypeCoercionError(PseudoIdPError):
    pass


class SessionNotFound(PseudoIdPError, KeyError):
    pass


class KeyGenerationError(PseudoIdPError):
    pass


class UnsupportedAlgorithm(PseudoIdPError):
    pass


class InvalidRequest(PseudoIdPError):
    pass
