LANGUAGE_SERVER_NAME = "arduino"
"""The key under which the user's language server settings are stored."""

GITHUB_REPO = "arduino/arduino-language-server"
GITHUB_API_BASE = "https://api.github.com"
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"
NETWORK_TIMEOUT = 60
"""Timeout (in seconds) for release feed queries and downloads."""

EXECUTABLE_NAME = "arduino-language-server"
SYSTEM_EXECUTABLE_NAME = "arduino_language_server"
"""The name under which a system-wide installation is looked up on the PATH."""
ASSET_ARCHIVE_SUFFIX = ".tar.gz"

CLI_CONFIG_FLAG = "-cli-config"
CLANGD_FLAG = "-clangd"
CLI_FLAG = "-cli"
CLANGD_EXECUTABLE_NAME = "clangd"
ARDUINO_CLI_EXECUTABLE_NAME = "arduino-cli"
ARDUINO_CLI_CONFIG_FILE_NAME = "arduino-cli.yaml"

ARDUINOLS_HOME_ENV_VAR = "ARDUINOLS_HOME"
ARDUINOLS_MANAGED_DIR_NAME = ".arduinols"
SETTINGS_FILE_NAME = ".arduinols.yml"
"""The name of the per-worktree settings file read by the YAML settings provider."""

ARDUINOLS_FILE_ENCODING = "utf-8"
ARDUINOLS_LOG_FORMAT = "%(levelname)-5s %(asctime)-15s %(name)s:%(funcName)s:%(lineno)d - %(message)s"
