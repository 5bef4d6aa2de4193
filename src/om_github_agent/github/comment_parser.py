"""Comment parser for OM GitHub Agent commands.

Parses `@<mention-name> create-pr` commands from GitHub issue comments:

    @om-bot create-pr <source-branch> <target-branch> "<PR title>"

The title may also be given without quotes, in which case everything after
the target branch is used verbatim.
"""

import enum
import re
from dataclasses import dataclass
from typing import Optional


CREATE_PR_COMMAND = "create-pr"

# source, target, then an optional quoted title directly after the target
ARGUMENTS_PATTERN = re.compile(r'(\S+)\s+(\S+)(?:\s+"([^"]*)")?')


class ParseStatus(enum.Enum):
    """Outcome of parsing a single comment."""

    NOT_MENTIONED = "not_mentioned"
    MALFORMED = "malformed"
    COMMAND = "command"


@dataclass(frozen=True)
class ParsedCommand:
    """A validated create-pr command."""

    source_branch: str
    target_branch: str
    title: str


@dataclass(frozen=True)
class ParseOutcome:
    status: ParseStatus
    command: Optional[ParsedCommand] = None

    @property
    def is_command(self) -> bool:
        return self.status is ParseStatus.COMMAND


NOT_MENTIONED = ParseOutcome(ParseStatus.NOT_MENTIONED)
MALFORMED = ParseOutcome(ParseStatus.MALFORMED)


def mention_pattern(mention_name: str) -> re.Pattern:
    """Build the case-insensitive `@<mention_name> create-pr` pattern."""
    return re.compile(
        rf"@{re.escape(mention_name)} {CREATE_PR_COMMAND}",
        re.IGNORECASE,
    )


def usage_message(mention_name: str) -> str:
    """Usage text posted back when a command cannot be parsed."""
    return (
        f"Invalid command format. Please use: @{mention_name} {CREATE_PR_COMMAND} "
        f'<source-branch> <target-branch> "<PR title>"'
    )


def parse_create_pr_command(comment_body: str, mention_name: str) -> ParseOutcome:
    """Parse a create-pr command from a comment.

    The mention may appear anywhere in the comment. Only the mention phrase
    is matched case-insensitively; branch names and the title are returned
    exactly as written.

    Returns:
        ParseOutcome with status NOT_MENTIONED when the comment does not
        address the bot, MALFORMED when it does but the arguments are
        incomplete, or COMMAND with the parsed arguments.
    """
    mention = mention_pattern(mention_name).search(comment_body)
    if not mention:
        return NOT_MENTIONED

    tail = comment_body[mention.end():].strip()

    match = ARGUMENTS_PATTERN.search(tail)
    if not match:
        return MALFORMED

    source_branch = match.group(1).strip()
    target_branch = match.group(2).strip()

    if match.group(3) is not None:
        title = match.group(3)
    else:
        # Unquoted title: everything after the target branch
        title = tail[match.end(2):]
    title = title.strip()

    if not source_branch or not target_branch or not title:
        return MALFORMED

    return ParseOutcome(
        ParseStatus.COMMAND,
        ParsedCommand(
            source_branch=source_branch,
            target_branch=target_branch,
            title=title,
        ),
    )
