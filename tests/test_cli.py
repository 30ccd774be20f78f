"""
CLI interface tests for release-tool.
Tests the command-line interface and main entry points.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from src.release_tool.main import cli


@pytest.fixture
def mock_git(release_git):
    """Route the CLI's GitClient to the in-memory repository."""
    with patch("src.release_tool.main.GitClient") as mock_client:
        mock_client.from_config.return_value = release_git
        yield mock_client


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        """Test CLI help message."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "release-tool" in result.output
        assert "generate" in result.output

    def test_cli_version(self):
        """Test CLI version display."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_no_command_shows_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "summary" in result.output

    def test_info_command(self):
        """Test the info command."""
        runner = CliRunner()
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "vendor.conf" in result.output
        assert "RELEASE_TOOL_REPOSITORY" in result.output


class TestGenerateCommand:
    """Test the generate command functionality."""

    def test_generate_to_stdout(self, mock_git, release_file):
        """Test rendering release notes with the built-in template."""
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file)])

        assert result.exit_code == 0, result.output
        assert "example 1.1.0" in result.output
        assert "Welcome to the v1.1.0 release of example!" in result.output
        assert "* **github.com/gogo/protobuf**  v1.3.1 **_new_**" in result.output

    def test_generate_tag_override(self, mock_git, release_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "--tag", "v1.1.0-rc.1"])

        assert result.exit_code == 0, result.output
        assert "example 1.1.0-rc.1" in result.output

    def test_generate_linkify(self, mock_git, release_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "--linkify"])

        assert result.exit_code == 0, result.output
        assert "[#42](https://github.com/org/proj/pull/42)" in result.output
        assert "[`1a2b3c4`](https://github.com/org/proj/commit/1a2b3c4" in result.output

    def test_generate_to_file(self, mock_git, release_file, temp_dir):
        """Test writing release notes to a file."""
        output_file = temp_dir / "NOTES.md"

        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "-o", str(output_file)])

        assert result.exit_code == 0, result.output
        assert "Release notes saved" in result.output
        assert output_file.read_text(encoding="utf-8").startswith("example 1.1.0\n")

    def test_generate_custom_template(self, mock_git, release_file, temp_dir):
        template = temp_dir / "short.tmpl"
        template.write_text(
            "{{ tag }}:{% for dep in dependencies %} {{ dep.name }}{% endfor %}\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "-T", str(template)])

        assert result.exit_code == 0, result.output
        assert result.output.startswith("v1.1.0: github.com/containerd/cgroups")

    def test_generate_missing_template(self, mock_git, release_file, temp_dir):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["generate", str(release_file), "-T", str(temp_dir / "nope.tmpl")]
        )

        assert result.exit_code != 0
        assert "does not exist" in result.output

    def test_generate_template_render_failure(self, mock_git, release_file, temp_dir):
        template = temp_dir / "broken.tmpl"
        template.write_text("{{ missing.attr }}\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "-T", str(template)])

        assert result.exit_code == 1
        assert "could not render template" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_generate_passes_git_config(self, mock_git, release_file):
        """Test that -c overrides reach the git client."""
        runner = CliRunner()
        result = runner.invoke(
            cli, ["generate", str(release_file), "-c", "core.abbrev=12", "-c", "log.mailmap=true"]
        )

        assert result.exit_code == 0, result.output
        git_config = mock_git.from_config.call_args[0][0]
        assert git_config.configs == {"core.abbrev": "12", "log.mailmap": "true"}

    def test_generate_invalid_git_config(self, mock_git, release_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(release_file), "-c", "core.abbrev"])

        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_generate_missing_release_file(self, mock_git, temp_dir):
        """Test a release file that does not exist."""
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(temp_dir / "v9.9.9.toml")])

        assert result.exit_code != 0
        assert "please specify the release file" in result.output
        mock_git.from_config.assert_not_called()

    def test_generate_debug_reports_logged_errors(self, mock_git, temp_dir):
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", str(temp_dir / "v9.9.9.toml"), "--debug"])

        assert result.exit_code == 1
        assert "Logged errors:" in result.output
        assert "CONFIGURATION_ERROR: 1" in result.output

    def test_generate_without_release_file(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["generate"])

        assert result.exit_code == 2
        assert "RELEASE_FILE" in result.output

    def test_generate_missing_manifest(self, fake_git, release_file):
        with patch("src.release_tool.main.GitClient") as mock_client:
            mock_client.from_config.return_value = fake_git(log="abc123 Fix bug\n")

            runner = CliRunner()
            result = runner.invoke(cli, ["generate", str(release_file)])

        assert result.exit_code == 1
        assert "finding current dep file failed" in result.output


class TestSummaryCommand:
    """Test the summary command."""

    def test_summary(self, mock_git, release_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["summary", str(release_file)])

        assert result.exit_code == 0, result.output
        assert "Release v1.1.0" in result.output
        assert "UPDATED" in result.output
        assert "NEW" in result.output
        assert "Bob Builder" in result.output

    def test_summary_no_dependency_changes(self, fake_git, temp_dir):
        release_file = temp_dir / "v2.0.0.toml"
        release_file.write_text('commit = "v2.0.0"\nprevious = "v1.0.0"\n')
        manifest = "github.com/pkg/errors v0.8.0\n"
        git = fake_git(
            files={("v1.0.0", "vendor.conf"): manifest, ("v2.0.0", "vendor.conf"): manifest},
            log="abc123 Fix bug\n",
            authors="a@x.com Alice\n",
        )

        with patch("src.release_tool.main.GitClient") as mock_client:
            mock_client.from_config.return_value = git

            runner = CliRunner()
            result = runner.invoke(cli, ["summary", str(release_file)])

        assert result.exit_code == 0, result.output
        assert "no dependency changes" in result.output


class TestConfigCommands:
    """Test configuration management commands."""

    def test_config_init(self, temp_dir):
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "init"])

        assert result.exit_code == 0
        config_path = temp_dir / ".release-tool.json"
        data = json.loads(config_path.read_text())
        assert data["git"]["configs"] == {"core.abbrev": "12"}
        assert data["output"]["template"] == "TEMPLATE"

    def test_config_init_existing(self, temp_dir):
        config_path = temp_dir / ".release-tool.json"
        config_path.write_text("{}")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "init"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert config_path.read_text() == "{}"

    def test_config_init_force(self, temp_dir):
        config_path = temp_dir / ".release-tool.json"
        config_path.write_text("{}")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert "core.abbrev" in config_path.read_text()

    def test_config_show_defaults(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Repository: ." in result.output
        assert "Linkify: False" in result.output
        assert "Log Level: WARNING" in result.output

    def test_config_show_file_and_environment(self, temp_dir, monkeypatch):
        (temp_dir / ".release-tool.json").write_text(
            json.dumps({"output": {"linkify": True}, "git": {"configs": {"core.abbrev": "12"}}})
        )
        monkeypatch.setenv("RELEASE_TOOL_REPOSITORY", "/srv/project")
        monkeypatch.setenv("RELEASE_TOOL_LOG_LEVEL", "debug")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Repository: /srv/project" in result.output
        assert "-c core.abbrev=12" in result.output
        assert "Linkify: True" in result.output
        assert "Log Level: DEBUG" in result.output
