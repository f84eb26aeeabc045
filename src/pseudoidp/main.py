#!/usr/bin/env python3
import argparse
import copy
import logging
import os

from pseudoidp.application import pseudoidp_init_app
from pseudoidp.configure import SERVER_DEFAULT_CONFIG
from pseudoidp.logging import configure_logging
from pseudoidp.utils import load_config_file

logger = logging.getLogger(__name__)


def server_config(config_file: str = "") -> dict:
    conf = copy.deepcopy(SERVER_DEFAULT_CONFIG)
    if config_file:
        _conf = load_config_file(config_file)
        if _conf:
            conf.update(_conf)

    # Relative file names are looked up next to the server config
    if config_file:
        _dir = os.path.dirname(os.path.abspath(config_file))
        for key in ["idp_config", "logging", "cert", "key"]:
            _val = conf.get(key)
            if _val and isinstance(_val, str) and not os.path.isabs(_val):
                conf[key] = os.path.join(_dir, _val)
    return conf


def main(config_file: str = "", debug: bool = False):
    conf = server_config(config_file)
    debug = debug or conf["debug"]

    _log_conf = conf.get("logging")
    if isinstance(_log_conf, dict):
        configure_logging(debug=debug, config=_log_conf)
    else:
        configure_logging(debug=debug, filename=_log_conf or "")

    app = pseudoidp_init_app(conf, "pseudoidp")

    ssl_context = None
    if conf.get("cert") and conf.get("key"):
        ssl_context = (conf["cert"], conf["key"])

    logger.info("Serving on {}:{}".format(conf["domain"], conf["port"]))
    app.run(
        host=conf["domain"],
        port=conf["port"],
        debug=debug,
        ssl_context=ssl_context,
        threaded=True,
        use_reloader=False,
    )


def run():
    parser = argparse.ArgumentParser(description="Configurable mock OpenID Connect IdP")
    parser.add_argument("-c", dest="config", default="", help="Server configuration file")
    parser.add_argument("-d", dest="debug", action="store_true", help="Debug logging")
    args = parser.parse_args()
    main(args.config, args.debug)


if __name__ == "__main__":
    run()
