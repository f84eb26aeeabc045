from pseudoidp.endpoint import RespondEndpoint


class UserInfo(RespondEndpoint):
    name = "userinfo"
    endpoint_path = "oauth2/userinfo"
    action_attr = "userinfo_action"
