import logging
from unittest.mock import patch

import openai
import pytest

from branch_reviewer.cli import main, parse_args
from branch_reviewer.errors import EmptyChangeSet, InvalidRevision, MalformedResponse
from branch_reviewer.output import CommentType, Review, ReviewComment

REVIEW = Review(
    comments=[
        ReviewComment(
            category=CommentType.QUESTION,
            location="README.md",
            line_excerpt="## Usage",
            body="Have you updated the docs?",
        )
    ]
)


class TestParseArgs:
    def test_defaults_to_review(self):
        args = parse_args([])
        assert args.command == "review"
        assert args.prompt is None
        assert args.against is None
        assert args.verbose is False

    def test_review_options(self):
        args = parse_args(["review", "-p", "be brief", "--against", "v1.0"])
        assert args.command == "review"
        assert args.prompt == "be brief"
        assert args.against == "v1.0"

    def test_review_long_prompt(self):
        args = parse_args(["review", "--prompt", "be brief"])
        assert args.prompt == "be brief"

    def test_show_diff(self):
        args = parse_args(["show-diff", "--against", "HEAD~3"])
        assert args.command == "show-diff"
        assert args.against == "HEAD~3"

    def test_show_diff_rejects_prompt(self):
        with pytest.raises(SystemExit):
            parse_args(["show-diff", "--prompt", "x"])

    def test_verbose_short(self):
        assert parse_args(["-v", "review"]).verbose is True

    def test_verbose_long(self):
        assert parse_args(["--verbose"]).verbose is True


class TestMain:
    def test_review_renders(self, capsys):
        with patch("branch_reviewer.cli.get_changes", return_value="+ code") as mock_changes, \
                patch("branch_reviewer.cli.review", return_value=(REVIEW, 3.3)) as mock_review:
            main(["review", "--against", "v1.0", "-p", "custom"])

        mock_changes.assert_called_once_with("v1.0")
        mock_review.assert_called_once_with("+ code", prompt="custom")
        out = capsys.readouterr().out
        assert out.startswith("Code Review Results [$3.30]")
        assert "[Question] in: README.md" in out

    def test_no_command_reviews_without_overrides(self, capsys):
        with patch("branch_reviewer.cli.get_changes", return_value="+ code") as mock_changes, \
                patch("branch_reviewer.cli.review", return_value=(REVIEW, None)) as mock_review:
            main([])

        mock_changes.assert_called_once_with(None)
        mock_review.assert_called_once_with("+ code", prompt=None)
        assert "[$0.00]" in capsys.readouterr().out

    def test_show_diff_prints_raw(self, capsys):
        diff = "diff --git a/x b/x\n+line\n"
        with patch("branch_reviewer.cli.get_changes", return_value=diff), \
                patch("branch_reviewer.cli.review") as mock_review:
            main(["show-diff"])

        assert capsys.readouterr().out == diff
        mock_review.assert_not_called()

    def test_invalid_revision_exits(self, capsys):
        with patch("branch_reviewer.cli.get_changes", side_effect=InvalidRevision("Invalid git revision: abc123")), \
                patch("branch_reviewer.cli.review") as mock_review:
            with pytest.raises(SystemExit) as exc_info:
                main(["review", "--against", "abc123"])

        assert exc_info.value.code == 1
        mock_review.assert_not_called()
        captured = capsys.readouterr()
        assert "Invalid git revision: abc123" in captured.err
        assert captured.out == ""

    def test_empty_change_set_exits(self, capsys):
        with patch("branch_reviewer.cli.get_changes", side_effect=EmptyChangeSet("No changes found")):
            with pytest.raises(SystemExit) as exc_info:
                main(["show-diff"])

        assert exc_info.value.code == 1
        assert "No changes found" in capsys.readouterr().err

    def test_boundary_error_renders_nothing(self, capsys):
        with patch("branch_reviewer.cli.get_changes", return_value="+ code"), \
                patch("branch_reviewer.cli.review", side_effect=MalformedResponse("bad payload")):
            with pytest.raises(SystemExit):
                main([])

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "bad payload" in captured.err

    def test_missing_credentials_exits(self, monkeypatch, capsys):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with patch("branch_reviewer.cli.get_changes", return_value="+ code"), \
                patch("branch_reviewer.llm.OpenAI", side_effect=openai.OpenAIError("Missing credentials")):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error:" in captured.err
        assert "Missing credentials" in captured.err

    def test_configures_httpx_quietly(self):
        with patch("branch_reviewer.cli.get_changes", return_value="+ code"), \
                patch("branch_reviewer.cli.review", return_value=(REVIEW, 0.0)):
            main(["-v"])

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_verbose_progress(self, caplog):
        caplog.set_level(logging.INFO, logger="branch_reviewer.cli")
        with patch("branch_reviewer.cli.get_changes", return_value="+ code"), \
                patch("branch_reviewer.cli.review", return_value=(REVIEW, 0.0)):
            main(["-v"])

        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "Fetching changes against default branch...",
            "Sending changes to AI for review...",
        ]
