# General script configuration to be run at service start
import logging.config
import warnings

import yaml

import configs
from tools import process


def setup_warnings():
    warnings.simplefilter(action='ignore', category=FutureWarning)
    warnings.simplefilter(action='ignore', category=UserWarning, append=True)
    warnings.simplefilter(action='ignore', category=DeprecationWarning, append=True)


def get_logging_config(filepath: str = configs.LOGGING_CONFIG_FILE) -> dict:
    with open(filepath) as f:
        dict_config = yaml.safe_load(f)

    if configs.LOG_FILE:
        dict_config['handlers']['logfile']['filename'] = configs.LOG_FILE
    else:
        del dict_config['handlers']['logfile']
        dict_config['root']['handlers'].remove('logfile')

    if configs.LOG_AWS:
        dict_config['handlers']['watchtower']['log_stream_name'] = \
            f'{configs.LOG_STREAM_NAME}-{{strftime:%y-%m-%d}}'
    else:
        del dict_config['handlers']['watchtower']
        dict_config['root']['handlers'].remove('watchtower')

    dict_config['root']['level'] = configs.LOG_LEVEL
    dict_config['loggers']['tools.cache'] = {'level': configs.CACHE_LOG_LEVEL}
    return dict_config


def setup_logger():
    logging.config.dictConfig(get_logging_config())


def setup():
    setup_warnings()
    setup_logger()
    process.setup_signal_handlers()
