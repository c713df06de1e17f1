"""Tests for the argparse entry points and their exit codes."""

from unittest.mock import patch

import pytest

from src.common.config import AffiliateFields
from src.content_engine import main as prebuild_main
from src.content_engine.affiliate_injector import main as inject_main
from src.content_engine.affiliate_injector import injector as injector_module
from src.content_engine.content_sync import main as sync_main
from src.content_engine.verifier import main as verify_main
from src.content_engine.link_builder import AffiliateCatalog, ProductCatalog

AIRTABLE_VARS = [
    "AIRTABLE_TOKEN",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_POSTS_TABLE_ID",
    "AIRTABLE_AFF_TABLE_ID",
    "CI",
    "AFF_VERIFY_EMPTY_LINKS",
    "REQUEST_TIMEOUT",
]


# === Fixtures ===


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so teardown also removes values loaded from env files
    for name in AIRTABLE_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "test.env"
    path.write_text("", encoding="utf-8")
    return str(path)


# === Test: Verifier CLI ===


class TestVerifyMain:
    def test_clean_tree_exits_zero(self, clean_env, env_file, write_post, content_dir):
        write_post("ok.md", "fine\n", title="Ok")
        assert verify_main.main(["--content-dir", str(content_dir), "--env-file", env_file]) == 0

    def test_residual_exits_one(self, clean_env, env_file, write_post, content_dir):
        write_post("bad.md", "[AffiliateLink_X]\n", title="Bad")
        assert verify_main.main(["--content-dir", str(content_dir), "--env-file", env_file]) == 1

    def test_check_empty_links_flag(self, clean_env, env_file, write_post, content_dir):
        write_post("empty.md", "[Buy]()\n", title="E")
        args = ["--content-dir", str(content_dir), "--env-file", env_file]
        assert verify_main.main(args) == 0
        assert verify_main.main(args + ["--check-empty-links"]) == 1


# === Test: Missing configuration ===


class TestConfigurationErrors:
    def test_inject_without_credentials(self, clean_env, env_file, content_dir):
        assert inject_main.main(["--content-dir", str(content_dir), "--env-file", env_file]) == 1

    def test_sync_without_credentials(self, clean_env, env_file, content_dir):
        assert sync_main.main(["--content-dir", str(content_dir), "--env-file", env_file]) == 1

    def test_malformed_env_value_exits_one(self, clean_env, tmp_path, content_dir, caplog):
        env = tmp_path / "bad.env"
        env.write_text("REQUEST_TIMEOUT=soon\n", encoding="utf-8")
        code = inject_main.main(["--content-dir", str(content_dir), "--env-file", str(env)])
        assert code == 1
        assert "REQUEST_TIMEOUT" in caplog.text

    def test_broken_front_matter_exits_one(self, clean_env, env_file, content_dir, caplog):
        (content_dir / "broken.md").write_text("---\ntitle: [oops\n---\n", encoding="utf-8")
        creds = {"AIRTABLE_TOKEN": "pat", "AIRTABLE_BASE_ID": "app", "AIRTABLE_AFF_TABLE_ID": "tbl"}
        catalogs = (AffiliateCatalog([], AffiliateFields()), ProductCatalog())
        with patch.dict("os.environ", creds), patch.object(
            injector_module, "load_catalogs", return_value=catalogs
        ):
            code = inject_main.main(["--content-dir", str(content_dir), "--env-file", env_file])
        assert code == 1
        assert "broken.md" in caplog.text

    def test_env_file_values_are_used(self, clean_env, tmp_path, content_dir):
        env = tmp_path / "creds.env"
        env.write_text(
            "AIRTABLE_TOKEN=pat\nAIRTABLE_BASE_ID=app\nAIRTABLE_AFF_TABLE_ID=tbl\n",
            encoding="utf-8",
        )
        with patch.object(inject_main, "run_injection") as run:
            code = inject_main.main(["--content-dir", str(content_dir), "--env-file", str(env)])
        assert code == 0
        settings = run.call_args.args[0]
        assert settings.airtable.token == "pat"
        assert settings.paths.content_dir == content_dir


# === Test: Prebuild CLI ===


class TestPrebuildMain:
    def test_ci_without_credentials(self, clean_env, env_file, write_post, content_dir, monkeypatch):
        monkeypatch.setenv("CI", "true")
        write_post("ok.md", "fine\n", title="Ok")
        args = ["--content-dir", str(content_dir), "--env-file", env_file]
        assert prebuild_main.main(args) == 0

    def test_missing_credentials_outside_ci(self, clean_env, env_file, content_dir):
        args = ["--content-dir", str(content_dir), "--env-file", env_file]
        assert prebuild_main.main(args) == 1

    def test_options_reach_pipeline(self, clean_env, env_file, content_dir):
        with patch.object(prebuild_main, "run_pipeline") as run:
            prebuild_main.main([
                "--content-dir", str(content_dir),
                "--env-file", env_file,
                "--skip-sync",
                "--debug",
            ])
        settings = run.call_args.args[0]
        assert run.call_args.kwargs["skip_sync"] is True
        assert settings.runtime.debug is True
