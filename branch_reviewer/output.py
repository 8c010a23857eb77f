from __future__ import annotations

import sys
from enum import Enum
from typing import TextIO

from pydantic import BaseModel, ConfigDict


class CommentType(str, Enum):
    NITPICK = "Nitpick"
    LEFTOVER_DEBUG = "LeftoverDebug"
    UNNECESSARY_COMMENT = "UnnecessaryComment"
    STYLE_ISSUE = "StyleIssue"
    QUESTION = "Question"
    ISSUE = "Issue"
    SUGGESTION = "Suggestion"
    IDEA = "Idea"


class ReviewComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: CommentType
    location: str
    line_excerpt: str
    body: str


class Review(BaseModel):
    comments: list[ReviewComment]


RESET = "\x1b[0m"

CATEGORY_COLORS = {
    CommentType.NITPICK: "\x1b[38;5;208m",  # orange
    CommentType.LEFTOVER_DEBUG: "\x1b[38;5;9m",  # bright red
    CommentType.UNNECESSARY_COMMENT: "\x1b[38;5;8m",  # gray
    CommentType.STYLE_ISSUE: "\x1b[38;5;226m",  # yellow
    CommentType.QUESTION: "\x1b[38;5;39m",  # blue
    CommentType.ISSUE: "\x1b[38;5;196m",  # red
    CommentType.SUGGESTION: "\x1b[38;5;34m",  # green
    CommentType.IDEA: "\x1b[38;5;141m",  # purple
}


def color_for(category: CommentType) -> str:
    return CATEGORY_COLORS[category]


def format_header(cost: float | None) -> str:
    return f"Code Review Results [${cost or 0.0:.2f}]\n===================\n"


def format_comment(comment: ReviewComment) -> str:
    color = color_for(comment.category)
    tag = comment.category.value
    lines = [
        f"{color}[{tag}] in: {comment.location}{RESET}",
        f"{' ' * (len(tag) + 1)}line: {comment.line_excerpt.strip()}",
        f"{color}{comment.body}{RESET}",
        "",
    ]
    return "\n".join(lines)


def format_review(review: Review, cost: float | None) -> str:
    """Render the full report: cost header, then every comment in order."""
    blocks = [format_header(cost)]
    blocks.extend(format_comment(c) for c in review.comments)
    return "\n".join(blocks) + "\n"


def render(review: Review, cost: float | None, stream: TextIO | None = None) -> None:
    (stream or sys.stdout).write(format_review(review, cost))
