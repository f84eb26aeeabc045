from typing import Optional

from flask.app import Flask

from pseudoidp.server import Server


def pseudoidp_init_app(conf: Optional[dict] = None, name: Optional[str] = None, server=None, **kwargs):
    """
    Create the Flask application.

    :param conf: Server settings
    :param name: Application name
    :param server: An existing Server instance to serve
    :return: Flask application
    """
    name = name or __name__
    app = Flask(name, **kwargs)

    from .views import pseudoidp_views

    app.register_blueprint(pseudoidp_views)

    app.server = server or Server(conf)

    return app
