"""Prompts for code review."""

from typing import TYPE_CHECKING

from diffcritic.services.github.models import PullRequestInfo

if TYPE_CHECKING:
    from diffcritic.services.review.diff_parser import Hunk

REVIEW_INSTRUCTIONS = """You are a code review bot.

- Respond with JSON: {"reviews": [{"lineNumber": <line>, "reviewComment": "<comment>"}]}
- Only comment if there is room for improvement; otherwise, reviews is an empty array.
- No compliments or positive feedback.
- Use GitHub Markdown.
- Use PR title and description as context.
- Do NOT suggest adding comments to the code."""


def format_hunk(hunk: "Hunk") -> str:
    """Render a hunk as its header followed by ``<line number> <diff line>`` rows."""
    rows = [hunk.header]
    rows.extend(f"{line.line_number} {line}" for line in hunk.lines)
    return "\n".join(rows)


def build_review_prompt(file_path: str, hunk: "Hunk", pr_info: PullRequestInfo) -> str:
    """Build the prompt asking for a review of one hunk."""

    parts = [
        REVIEW_INSTRUCTIONS,
        "",
        f"PR Title: {pr_info.title}",
        "PR Description:",
        "",
        "---",
        pr_info.body,
        "---",
        "",
        f'Diff of file "{file_path}":',
        "",
        "```diff",
        format_hunk(hunk),
        "```",
    ]

    return "\n".join(parts).strip()
