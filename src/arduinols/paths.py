import os
from pathlib import Path

from arduinols.constants import ARDUINOLS_HOME_ENV_VAR, ARDUINOLS_MANAGED_DIR_NAME


class ArduinoLSPaths:
    """
    Provides paths to the directories managed by arduinols.
    """

    def __init__(self) -> None:
        home_dir = os.getenv(ARDUINOLS_HOME_ENV_VAR)
        if home_dir is None or home_dir.strip() == "":
            home_dir = str(Path.home() / ARDUINOLS_MANAGED_DIR_NAME)
        else:
            home_dir = home_dir.strip()
        self.arduinols_home_dir: str = home_dir
        """
        the directory in which arduinols stores its data.
        This is ~/.arduinols by default, but it can be overridden via the ARDUINOLS_HOME environment variable.
        """
        self.language_servers_dir: str = os.path.join(self.arduinols_home_dir, "language_servers")
        """
        the directory containing the downloaded language server versions
        """
