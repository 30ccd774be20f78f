"""
Shared fixtures for release-tool tests.
"""

import subprocess
from pathlib import Path

import pytest

from src.release_tool.cli_config import reset_config
from src.release_tool.error_handling import ManifestNotFoundError

SAMPLE_VENDOR_CONF = """\
# runtime dependencies
github.com/containerd/cgroups 5fbad35c2a7e855762d3c60f2e474ffcad0d470a
github.com/pkg/errors v0.8.0

golang.org/x/sys 1b2967e3c290b7c545b3db0deeda16e9be4f98a2 https://github.com/golang/sys # pinned
github.com/old/name 0123456789abcdef0123456789abcdef01234567
"""

SAMPLE_GO_MOD = """\
module github.com/example/project

go 1.13

require (
	github.com/containerd/cgroups v0.0.0-20200327175542-b44481373989
	github.com/new/name v0.0.0-20200101000000-0123456789ab
	github.com/pkg/errors v0.9.1 // indirect
	github.com/gogo/protobuf v1.3.1+incompatible
	golang.org/x/sys v0.0.0-20200120151820-655fe14d7479
)

replace github.com/gogo/protobuf => github.com/gogo/protobuf v1.3.2
"""


class FakeGit:
    """In-memory stand-in for GitClient."""

    def __init__(self, files=None, log="", authors="", full_hashes=None):
        self.files = files or {}
        self.log = log
        self.authors = authors
        self.full_hashes = full_hashes or {}
        self.calls = []

    def show_file(self, revision, path):
        self.calls.append(("show_file", revision, path))
        if (revision, path) not in self.files:
            raise ManifestNotFoundError(
                f"fatal: path '{path}' does not exist in '{revision}'",
                path=path,
                revision=revision,
            )
        return self.files[(revision, path)]

    def log_oneline(self, previous, commit):
        self.calls.append(("log_oneline", previous, commit))
        return self.log

    def log_authors(self, previous, commit):
        self.calls.append(("log_authors", previous, commit))
        return self.authors

    def rev_parse(self, revision):
        self.calls.append(("rev_parse", revision))
        return self.full_hashes[revision]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config files and environment of the developer out of the tests."""
    for key in [
        "RELEASE_TOOL_REPOSITORY",
        "RELEASE_TOOL_GIT",
        "RELEASE_TOOL_GIT_CONFIG",
        "RELEASE_TOOL_TEMPLATE",
        "RELEASE_TOOL_LINKIFY",
        "RELEASE_TOOL_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    return tmp_path


@pytest.fixture
def fake_git():
    return FakeGit


@pytest.fixture
def release_git():
    """A repository migrating from vendor.conf at v1.0.0 to go.mod at v1.1.0."""
    return FakeGit(
        files={
            ("v1.0.0", "vendor.conf"): SAMPLE_VENDOR_CONF,
            ("v1.1.0", "go.mod"): SAMPLE_GO_MOD,
        },
        log=(
            "9f8e7d6 Merge pull request #42 from foo/bar\n"
            "1a2b3c4 Update   cgroups   dependency\n"
        ),
        authors=(
            "bob@example.com Bob Builder\n"
            "alice@example.com Alice\n"
            "bob@example.com Bob Builder\n"
        ),
        full_hashes={
            "9f8e7d6": "9f8e7d6" + "0" * 33,
            "1a2b3c4": "1a2b3c4" + "1" * 33,
        },
    )


@pytest.fixture
def release_file(temp_dir):
    path = temp_dir / "v1.1.0.toml"
    path.write_text(
        """\
project_name = "example"
github_repo = "org/proj"
commit = "v1.1.0"
previous = "v1.0.0"
pre_release = false
preface = "This release moves to go modules."

[notes.modules]
title = "Go modules"
description = "Dependencies are now managed with go.mod."

[breaking.api]
title = "Removed v1 API"
description = "The deprecated v1 API has been removed."

[rename_deps.name]
old = "github.com/old/name"
new = "github.com/new/name"
"""
    )
    return path


@pytest.fixture
def git_repo(temp_dir):
    """A real repository with tags v1.0.0 (vendor.conf) and v1.1.0 (go.mod)."""
    repo = temp_dir / "repo"
    repo.mkdir()

    def git(*args):
        subprocess.run(
            [
                "git",
                "-c", "user.name=Alice",
                "-c", "user.email=alice@example.com",
                "-c", "commit.gpgsign=false",
                "-c", "tag.gpgsign=false",
                *args,
            ],
            cwd=repo,
            check=True,
            capture_output=True,
        )

    git("init", "-q")
    (repo / "vendor.conf").write_text(SAMPLE_VENDOR_CONF)
    git("add", "vendor.conf")
    git("commit", "-q", "-m", "Initial import")
    git("tag", "v1.0.0")

    (repo / "vendor.conf").unlink()
    (repo / "go.mod").write_text(SAMPLE_GO_MOD)
    git("add", "-A")
    git("commit", "-q", "--author", "Bob <bob@example.com>", "-m", "Switch to go modules")
    git("commit", "-q", "--allow-empty", "-m", "Merge pull request #42 from foo/bar")
    git("tag", "v1.1.0")

    return Path(repo)


@pytest.fixture
def vendor_conf():
    return SAMPLE_VENDOR_CONF


@pytest.fixture
def go_mod():
    return SAMPLE_GO_MOD
