from pseudoidp.endpoint import RespondEndpoint


class ProviderConfiguration(RespondEndpoint):
    """The discovery document, built from parameters like any other response."""

    name = "provider_config"
    endpoint_path = ".well-known/openid-configuration"
    methods = ["GET"]
    action_attr = "discovery_action"
