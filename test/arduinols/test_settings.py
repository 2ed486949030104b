from pathlib import Path

import pytest

from arduinols.host import Worktree
from arduinols.settings import BinarySettings, DictSettingsProvider, LspSettings, SettingsProvider, YamlSettingsProvider
from test.conftest import FakeWorktree


class TestLspSettings:
    def test_from_dict(self) -> None:
        settings = LspSettings.from_dict(
            {"binary": {"path": "/opt/als", "arguments": ["-log", 1], "env": {"LEVEL": 3}}, "settings": {"fqbn": "arduino:avr:uno"}}
        )

        assert settings.binary == BinarySettings(path="/opt/als", arguments=["-log", "1"], env={"LEVEL": "3"})
        assert settings.settings == {"fqbn": "arduino:avr:uno"}
        assert settings.binary_path() == "/opt/als"

    def test_absent_binary_has_no_path(self) -> None:
        assert LspSettings.from_dict({"settings": {}}).binary_path() is None

    def test_binary_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="'binary' must be a mapping"):
            LspSettings.from_dict({"binary": "/opt/als"})


class TestDictSettingsProvider:
    def test_returns_settings_of_server(self, worktree: FakeWorktree) -> None:
        provider = DictSettingsProvider({"arduino": {"binary": {"path": "als"}}, "clangd": {"binary": {"path": "clangd"}}})

        settings = provider.lsp_settings("arduino", worktree)

        assert settings is not None
        assert settings.binary_path() == "als"

    def test_absent_server(self, worktree: FakeWorktree) -> None:
        assert DictSettingsProvider().lsp_settings("arduino", worktree) is None

    @pytest.mark.parametrize(
        "data",
        [
            {"settings": ["not", "a", "mapping"]},
            {"binary": {"arguments": "-log"}},
            {"binary": {"env": ["A=1"]}},
            "not a mapping",
        ],
    )
    def test_malformed_settings_are_treated_as_absent(self, worktree: FakeWorktree, data: object) -> None:
        provider = DictSettingsProvider({"arduino": data})

        assert provider.lsp_settings("arduino", worktree) is None


class TestSettingsProviderErrors:
    def test_unexpected_errors_propagate(self, worktree: FakeWorktree) -> None:
        """
        GIVEN a provider that fails with an error unrelated to reading or validating the settings
        WHEN retrieving the settings
        THEN the error is raised rather than being reported as absent settings
        """

        class FailingProvider(SettingsProvider):
            def _load_lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
                raise AttributeError("'NoneType' object has no attribute 'get'")

        with pytest.raises(AttributeError):
            FailingProvider().lsp_settings("arduino", worktree)

    def test_read_errors_are_treated_as_absent(self, worktree: FakeWorktree) -> None:
        class UnreadableProvider(SettingsProvider):
            def _load_lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
                raise PermissionError("permission denied")

        assert UnreadableProvider().lsp_settings("arduino", worktree) is None


class TestYamlSettingsProvider:
    def write_settings(self, worktree: FakeWorktree, content: str) -> None:
        (Path(worktree.root_path()) / ".arduinols.yml").write_text(content, encoding="utf-8")

    def test_reads_settings_from_worktree_root(self, worktree: FakeWorktree) -> None:
        """
        GIVEN a settings file in the worktree root with settings for the arduino server
        WHEN retrieving the settings
        THEN the binary settings and the free-form settings are both read
        """
        self.write_settings(
            worktree,
            "lsp:\n"
            "  arduino:\n"
            "    binary:\n"
            "      arguments: ['-fqbn', 'arduino:avr:uno']\n"
            "      env:\n"
            "        ARDUINO_DATA_DIR: /data\n"
            "    settings:\n"
            "      diagnostics: true\n",
        )

        settings = YamlSettingsProvider().lsp_settings("arduino", worktree)

        assert settings is not None
        assert settings.binary == BinarySettings(path=None, arguments=["-fqbn", "arduino:avr:uno"], env={"ARDUINO_DATA_DIR": "/data"})
        assert settings.settings == {"diagnostics": True}

    def test_missing_file(self, worktree: FakeWorktree) -> None:
        assert YamlSettingsProvider().lsp_settings("arduino", worktree) is None

    def test_empty_file(self, worktree: FakeWorktree) -> None:
        self.write_settings(worktree, "")

        assert YamlSettingsProvider().lsp_settings("arduino", worktree) is None

    def test_other_server_only(self, worktree: FakeWorktree) -> None:
        self.write_settings(worktree, "lsp:\n  clangd:\n    binary:\n      path: /usr/bin/clangd\n")

        assert YamlSettingsProvider().lsp_settings("arduino", worktree) is None

    @pytest.mark.parametrize("content", ["lsp: [1, 2\n", "- just\n- a list\n", "lsp: [arduino]\n", "lsp:\n  arduino:\n    binary: 42\n"])
    def test_unreadable_settings_are_treated_as_absent(self, worktree: FakeWorktree, content: str) -> None:
        self.write_settings(worktree, content)

        assert YamlSettingsProvider().lsp_settings("arduino", worktree) is None

    def test_custom_file_name(self, worktree: FakeWorktree) -> None:
        (Path(worktree.root_path()) / "lsp.yml").write_text("lsp:\n  arduino:\n    binary:\n      path: als\n")
        provider = YamlSettingsProvider(file_name="lsp.yml")

        assert provider.settings_file_path(worktree).endswith("lsp.yml")
        settings = provider.lsp_settings("arduino", worktree)
        assert settings is not None and settings.binary_path() == "als"
