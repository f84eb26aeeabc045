from pseudoidp.endpoint import RespondEndpoint


class Token(RespondEndpoint):
    """
    The token endpoint. Clients are supposed to POST here but any method is
    accepted. The ID Token is normally produced by a custom parameter bound
    to the ID Token builder.
    """

    name = "token"
    endpoint_path = "oauth2/token"
    action_attr = "token_action"
