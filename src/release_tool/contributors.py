from collections import Counter
from typing import List, Optional

from .dependency import Contributor
from .error_handling import MalformedInputError, log_parsing_error
from .parsers import split_lines
from .structured_logging import get_changelog_logger


def tally_contributors(raw: str, contributors: Counter) -> None:
    """
    Count ``email name`` author lines into a contributor tally.

    Raises:
        MalformedInputError: If a line has no space between email and name
    """
    for line in split_lines(raw):
        parts = line.split(" ", 1)
        if len(parts) != 2:
            log_parsing_error(
                "invalid author line", "contributors", "tally_contributors", line=line
            )
            raise MalformedInputError(f"invalid author line: {line!r}")
        contributors[Contributor(name=parts[1], email=parts[0])] += 1


def add_contributors(git, previous: Optional[str], commit: str, contributors: Counter) -> None:
    """Add the authors of every commit in a revision range to the tally."""
    tally_contributors(git.log_authors(previous, commit), contributors)


def order_contributors(contributors: Counter) -> List[str]:
    """Rank contributor names by commit count, ties broken by name."""
    ranked = sorted(
        contributors.items(),
        key=lambda item: (-item[1], item[0].name, item[0].email),
    )

    logger = get_changelog_logger()
    names = []
    for contributor, count in ranked:
        logger.debug(
            "contributor_ranked",
            contributor=contributor.name,
            email=contributor.email,
            commits=count,
        )
        names.append(contributor.name)
    return names
