import re
from typing import List

from .dependency import Dependency
from .error_handling import ManifestNotFoundError, MalformedInputError, log_parsing_error
from .structured_logging import get_manifest_logger

VENDOR_CONF = "vendor.conf"
GO_MOD = "go.mod"

_FULL_COMMIT = re.compile(r"[0-9a-f]{40}")
_INCOMPATIBLE = "+incompatible"


def split_lines(text: str) -> List[str]:
    """
    Split text on newlines only, dropping a trailing carriage return per line.

    Other characters ``str.splitlines`` treats as line boundaries (form feed,
    U+2028 and friends) stay inside the line they appear in.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def sanitize_line(line: str, comment_delim: str) -> str:
    """
    Strip surrounding whitespace and any trailing comment from a line.

    Returns an empty string for blank lines and lines that are entirely
    commented out.
    """
    ln = line.strip()
    if not ln:
        return ""

    cidx = ln.find(comment_delim)
    # whole line is commented
    if cidx == 0:
        return ""
    if cidx > 0:
        ln = ln[:cidx]

    return ln.strip()


def _default_clone_url(name: str) -> str:
    return f"git://{name}"


def parse_vendor_conf(content: str, source: str = VENDOR_CONF) -> List[Dependency]:
    """
    Parse a vendor.conf manifest.

    Each line holds ``name commit [cloneURL]`` with ``#`` comments. Full
    40-character hashes are shortened to 12 characters to line up with go.mod
    pseudo-versions.

    Raises:
        MalformedInputError: If a line does not have two or three fields
    """
    deps = []
    for line in split_lines(content):
        ln = sanitize_line(line, "#")
        if not ln:
            continue

        parts = ln.split()
        if len(parts) not in (2, 3):
            log_parsing_error(
                "invalid vendor.conf line", "parsers", "parse_vendor_conf", line=ln, source=source
            )
            raise MalformedInputError(f"invalid config format: {ln}")

        name, commit_or_version = parts[0], parts[1]
        clone_url = parts[2] if len(parts) == 3 else _default_clone_url(name)

        if _FULL_COMMIT.search(commit_or_version):
            commit_or_version = commit_or_version[:12]

        deps.append(Dependency(name=name, commit=commit_or_version, clone_url=clone_url))

    return deps


def get_commit_or_version(cov: str) -> str:
    """
    Reduce a go.mod version to the identifier shown in release notes.

    ``v1.2.3`` and ``v1.0.0-rc1`` are kept whole (minus ``+incompatible``);
    a pseudo-version ``v0.0.0-20190101000000-abcdef123456`` yields its commit
    hash. Returns an empty string for anything else.
    """
    dash_fields = [f for f in cov.split("-") if f]

    if len(dash_fields) in (1, 2):
        # +incompatible is idiomatic for modules but unsightly in notes
        incp_idx = cov.find(_INCOMPATIBLE)
        if incp_idx > 0:
            return cov[:incp_idx]
        return cov
    if len(dash_fields) == 3:
        # the version in the first field is often just a placeholder
        return dash_fields[2]
    return ""


def parse_go_mod(content: str, source: str = GO_MOD) -> List[Dependency]:
    """
    Parse the ``require ( ... )`` block of a go.mod file.

    Everything before the block is ignored and scanning stops at the closing
    parenthesis, so ``replace`` directives are not applied.

    Raises:
        MalformedInputError: If a line in the block is not ``module version``
            or the version cannot be interpreted
    """
    deps = []
    found_require = False

    for line in split_lines(content):
        ln = sanitize_line(line, "//")
        if not ln:
            continue
        parts = ln.split()

        if not found_require:
            if parts == ["require", "("]:
                found_require = True
            continue

        if len(parts) != 2:
            if parts == [")"]:
                break
            log_parsing_error(
                "invalid go.mod require line", "parsers", "parse_go_mod", line=ln, source=source
            )
            raise MalformedInputError(f"invalid config format: {ln}")

        commit_or_version = get_commit_or_version(parts[1])
        if not commit_or_version:
            log_parsing_error(
                "poorly formatted go.mod version", "parsers", "parse_go_mod", line=ln, source=source
            )
            raise MalformedInputError(
                f"invalid go.mod file, poorly formatted version in requires section {parts[1]}"
            )

        deps.append(
            Dependency(
                name=parts[0],
                commit=commit_or_version,
                clone_url=_default_clone_url(parts[0]),
            )
        )

    return deps


def parse_dependencies(git, revision: str) -> List[Dependency]:
    """
    Load the dependency list of a repository at a revision.

    vendor.conf is tried first and go.mod second.

    Args:
        git: GitClient for the repository
        revision: Revision to read the manifest from

    Returns:
        List[Dependency]: Dependencies in manifest order

    Raises:
        ManifestNotFoundError: If neither manifest exists at the revision
    """
    logger = get_manifest_logger()

    try:
        content = git.show_file(revision, VENDOR_CONF)
    except ManifestNotFoundError as vendor_err:
        try:
            content = git.show_file(revision, GO_MOD)
        except ManifestNotFoundError as go_mod_err:
            raise ManifestNotFoundError(
                "finding current dep file failed. "
                f"vendor.conf error: {vendor_err}, go.mod error: {go_mod_err}",
                revision=revision,
            ) from go_mod_err

        deps = parse_go_mod(content, source=f"{revision}:{GO_MOD}")
        logger.info("manifest_parsed", revision=revision, manifest=GO_MOD, dependencies=len(deps))
        return deps

    deps = parse_vendor_conf(content, source=f"{revision}:{VENDOR_CONF}")
    logger.info("manifest_parsed", revision=revision, manifest=VENDOR_CONF, dependencies=len(deps))
    return deps
