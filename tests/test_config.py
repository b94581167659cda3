"""
Tests for configuration loading.
"""

from __future__ import annotations

import json
import logging

import pytest

from quillpress.config.loader import (
    MASTER_ENV_VAR,
    EditorConfig,
    load_config,
    load_env_file,
)


URLS = {
    "QUILLPRESS_SIGNED_UPLOAD_URL": "https://fn.test/generateSignedUploadUrl",
    "QUILLPRESS_CREATE_ARTICLE_URL": "https://fn.test/createArticle",
    "QUILLPRESS_UPDATE_ARTICLE_URL": "https://fn.test/updateArticle",
}


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({})
        assert config == EditorConfig()
        assert config.http_timeout == 30.0
        assert config.max_concurrent_uploads == 0
        assert config.max_image_bytes == 0

    def test_individual_env_vars(self):
        env = dict(URLS, QUILLPRESS_HTTP_TIMEOUT="5", QUILLPRESS_MAX_CONCURRENT_UPLOADS="3")
        config = load_config(env)
        assert config.signed_upload_url == URLS["QUILLPRESS_SIGNED_UPLOAD_URL"]
        assert config.http_timeout == 5.0
        assert config.max_concurrent_uploads == 3
        assert config.validate() == []

    def test_master_json(self):
        master = {
            "signed_upload_url": "https://a.test/sign",
            "QUILLPRESS_CREATE_ARTICLE_URL": "https://a.test/create",
            "max_image_bytes": 1024,
        }
        config = load_config({MASTER_ENV_VAR: json.dumps(master)})
        assert config.signed_upload_url == "https://a.test/sign"
        assert config.create_article_url == "https://a.test/create"
        assert config.max_image_bytes == 1024

    def test_individual_overrides_master(self):
        env = {
            MASTER_ENV_VAR: json.dumps({"signed_upload_url": "https://master.test/sign"}),
            "QUILLPRESS_SIGNED_UPLOAD_URL": "https://env.test/sign",
        }
        assert load_config(env).signed_upload_url == "https://env.test/sign"

    @pytest.mark.parametrize("master", ["{not json", "[1, 2]"])
    def test_bad_master_is_logged(self, master, caplog):
        with caplog.at_level(logging.ERROR):
            config = load_config({MASTER_ENV_VAR: master})
        assert config == EditorConfig()
        assert MASTER_ENV_VAR in caplog.text

    @pytest.mark.parametrize("value", ["lots", "-2"])
    def test_bad_limits_are_ignored(self, value, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config({"QUILLPRESS_MAX_CONCURRENT_UPLOADS": value})
        assert config.max_concurrent_uploads == 0
        assert "QUILLPRESS_MAX_CONCURRENT_UPLOADS" in caplog.text

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("QUILLPRESS_AUTH_TOKEN", "tok")
        assert load_config().auth_token == "tok"


class TestValidate:
    def test_missing_urls(self):
        problems = EditorConfig().validate()
        assert len(problems) == 3
        assert all("is not set" in p for p in problems)

    def test_non_http_url(self):
        config = load_config(dict(URLS, QUILLPRESS_CREATE_ARTICLE_URL="ftp://x"))
        [problem] = config.validate()
        assert "QUILLPRESS_CREATE_ARTICLE_URL" in problem

    def test_timeout_must_be_positive(self):
        config = load_config(dict(URLS, QUILLPRESS_HTTP_TIMEOUT="0"))
        assert config.validate() == ["QUILLPRESS_HTTP_TIMEOUT must be positive"]


class TestEnvFile:
    def test_loads_dotenv_without_overriding(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "QUILLPRESS_SIGNED_UPLOAD_URL=https://file.test/sign\n"
            "QUILLPRESS_AUTH_TOKEN=from-file\n"
        )
        # Recorded so teardown restores whatever was there before
        monkeypatch.setenv("QUILLPRESS_SIGNED_UPLOAD_URL", "unset")
        monkeypatch.delenv("QUILLPRESS_SIGNED_UPLOAD_URL")
        monkeypatch.setenv("QUILLPRESS_AUTH_TOKEN", "from-env")

        assert load_env_file(env_file) is True

        config = load_config()
        assert config.signed_upload_url == "https://file.test/sign"
        assert config.auth_token == "from-env"

    def test_missing_file(self, tmp_path):
        assert load_env_file(tmp_path / "nope.env") is False
