import pytest

from easyapply.config import DEFAULTS, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("EASYAPPLY_PROVIDER", "TRACKER_URL", "RUN_HEADLESS"):
        monkeypatch.delenv(key, raising=False)


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "settings.yaml")
        assert settings == DEFAULTS
        assert settings is not DEFAULTS

    def test_yaml_overrides_are_merged(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "provider: dice\nlimits:\n  max_applications: 5\ntimeouts:\n  apply: 3\n",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings["provider"] == "dice"
        assert settings["limits"] == {"max_applications": 5, "max_pages": 20, "max_form_steps": 12}
        assert settings["timeouts"]["apply"] == 3
        assert settings["timeouts"]["submit"] == 10

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: dice\n", encoding="utf-8")
        monkeypatch.setenv("EASYAPPLY_PROVIDER", "Indeed")
        monkeypatch.setenv("TRACKER_URL", "http://tracker:9000")
        monkeypatch.setenv("RUN_HEADLESS", "yes")

        settings = load_settings(path)

        assert settings["provider"] == "indeed"
        assert settings["tracker"]["base_url"] == "http://tracker:9000"
        assert settings["browser"]["headless"] is True

    @pytest.mark.parametrize("raw, expected", [(5, 0.25), (0.0001, 0.01), (0.1, 0.1)])
    def test_poll_interval_is_clamped(self, tmp_path, raw, expected):
        path = tmp_path / "settings.yaml"
        path.write_text(f"timeouts:\n  poll_interval: {raw}\n", encoding="utf-8")
        assert load_settings(path)["timeouts"]["poll_interval"] == pytest.approx(expected)

    def test_non_mapping_is_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_settings(path)
