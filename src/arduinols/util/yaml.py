import logging
from typing import Any

from ruamel.yaml import YAML

from arduinols.constants import ARDUINOLS_FILE_ENCODING

log = logging.getLogger(__name__)


def _create_yaml() -> YAML:
    return YAML(typ="safe")


def load_yaml(path: str) -> Any:
    """
    :param path: the path to the YAML file to load
    :return: the loaded document (plain dicts/lists/scalars); None for an empty document
    """
    with open(path, encoding=ARDUINOLS_FILE_ENCODING) as f:
        return _create_yaml().load(f)
