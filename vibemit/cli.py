"""Command-line interface for vibemit."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .clipboard import copy_to_clipboard
from .commit import CommitGenerator
from .config import DEFAULT_PROVIDERS, describe_provider, load_config
from .exceptions import BackendUnavailableError, ConfigError, VibemitError
from .git import GitRepo
from .llm import LLMClient
from .normalize import OutputMode
from .prompts import build_system_prompt, build_user_prompt
from .rules import add_rule, clear_rules, get_rules, rules_path

logger = logging.getLogger(__name__)

CLIPBOARD_MISSING = (
    "Could not copy to clipboard. No clipboard tool found "
    "(pbcopy, wl-copy, xclip or clip)."
)


def format_for_display(message: str) -> str:
    """Show a multi-line message as its subject plus a body line count."""
    lines = message.split("\n")
    if len(lines) == 1:
        return message
    subject = lines[0]
    body_lines = [line for line in lines[1:] if line.strip()]
    if body_lines:
        plural = "s" if len(body_lines) > 1 else ""
        return f"{subject} (+{len(body_lines)} line{plural})"
    return subject


class CLI:
    """Argument parsing and the generate -> pick -> commit flow."""

    def __init__(self) -> None:
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        providers = ", ".join(describe_provider(p) for p in DEFAULT_PROVIDERS)
        parser = argparse.ArgumentParser(
            prog="vibemit",
            description="AI-generated Git commit messages using a local LLM",
        )
        parser.add_argument(
            "--version", action="version", version=f"%(prog)s {__version__}"
        )
        parser.add_argument("--model", help="model to use")
        parser.add_argument(
            "--provider",
            choices=sorted(DEFAULT_PROVIDERS),
            help=f"model backend: {providers}",
        )
        parser.add_argument("--endpoint", help="backend base URL")
        parser.add_argument("--intent", help="high-priority commit intent guidance")
        parser.add_argument(
            "--conventional",
            action="store_true",
            help="use Conventional Commit format",
        )
        parser.add_argument(
            "--body", action="store_true", help="include subject + body (1-3 bullets)"
        )
        parser.add_argument(
            "-d",
            "--dry-run",
            action="store_true",
            help="print selected message without committing",
        )
        parser.add_argument(
            "-c",
            "--clipboard",
            action="store_true",
            help="copy selected message to clipboard",
        )
        parser.add_argument(
            "-y",
            "--yes",
            action="store_true",
            help="auto-select the first option (skip prompt)",
        )
        parser.add_argument(
            "-r", "--add-rule", metavar="TEXT", help="add a persistent rule"
        )
        parser.add_argument("--rules", action="store_true", help="print saved rules")
        parser.add_argument(
            "--clear-rules", action="store_true", help="delete all saved rules"
        )
        parser.add_argument(
            "--list-models",
            action="store_true",
            help="list models available on the backend",
        )
        parser.add_argument(
            "--max-diff-lines",
            type=int,
            metavar="N",
            help="truncate the staged diff to N lines",
        )
        parser.add_argument(
            "--repo-path", default=".", help="path to the Git repository"
        )
        parser.add_argument(
            "--debug", action="store_true", help="log backend calls and retries"
        )
        return parser

    def run(self, args: Optional[List[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as exc:
            return int(exc.code or 0)

        logging.basicConfig(
            level=logging.DEBUG if parsed.debug else logging.WARNING,
            format="%(levelname)s: %(name)s: %(message)s",
        )

        repo_dir = Path(parsed.repo_path)
        if parsed.rules:
            return self._show_rules(repo_dir)
        if parsed.clear_rules:
            clear_rules(repo_dir)
            print("All rules cleared.")
            return 0
        if parsed.add_rule:
            path = add_rule(parsed.add_rule, repo_dir)
            print(f'Rule added: "{parsed.add_rule}"')
            print(f"Rules file: {path}")
            return 0

        overrides = {
            "provider": parsed.provider,
            "model": parsed.model,
            "endpoint": parsed.endpoint,
            "max_diff_lines": (
                str(parsed.max_diff_lines)
                if parsed.max_diff_lines is not None
                else None
            ),
        }
        try:
            config = load_config(overrides=overrides)
            client = LLMClient(config)
        except ConfigError as e:
            self._print_error(e)
            return 2

        try:
            if parsed.list_models:
                return self._list_models(client)
            return self._generate_and_commit(parsed, config, client)
        except BackendUnavailableError as e:
            self._print_error(e)
            if e.detail:
                print(e.detail, file=sys.stderr)
            return 1
        except VibemitError as e:
            self._print_error(e)
            return 1
        except KeyboardInterrupt:
            print("\nAborted.", file=sys.stderr)
            return 130

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------
    def _show_rules(self, repo_dir: Path) -> int:
        rules = get_rules(repo_dir)
        if not rules:
            print("No rules saved.")
            print(f"Rules file: {rules_path(repo_dir)}")
            return 0
        print("Saved rules:")
        for rule in rules:
            print(f"  - {rule}")
        print(f"\nRules file: {rules_path(repo_dir)}")
        return 0

    def _list_models(self, client: LLMClient) -> int:
        models = client.list_models()
        if not models:
            print("No models found.")
            return 0
        for model in models:
            print(model["id"])
        return 0

    def _generate_and_commit(self, parsed, config, client: LLMClient) -> int:
        repo = GitRepo(parsed.repo_path)
        diff = repo.get_staged_diff(config.max_diff_lines)

        client.check_available()

        mode = OutputMode.from_body_flag(parsed.body)
        stat = repo.get_staged_stat()
        system_prompt = build_system_prompt(
            conventional=parsed.conventional, body=parsed.body, intent=parsed.intent
        )
        user_prompt = build_user_prompt(
            diff, get_rules(repo.repo_path), parsed.body, parsed.intent, stat
        )

        print(f"Using model: {config.model}")
        print("Generating commit messages...\n")

        generator = CommitGenerator(client, config)
        candidates = generator.generate(system_prompt, user_prompt, config.model, mode)
        logger.debug("cli.candidates count=%d mode=%s", len(candidates), mode.value)

        if parsed.yes:
            selected = candidates[0]
            print(f"Auto-selected: {format_for_display(selected)}\n")
        else:
            selected = self._select_candidate(candidates)
            print()

        if parsed.dry_run:
            print(selected)
            if parsed.clipboard:
                if copy_to_clipboard(selected):
                    print("\nCopied to clipboard.")
                else:
                    print("\n" + CLIPBOARD_MISSING, file=sys.stderr)
            return 0

        if parsed.clipboard:
            if copy_to_clipboard(selected):
                print("Copied to clipboard.")
                return 0
            print(CLIPBOARD_MISSING, file=sys.stderr)
            return 1

        try:
            output = repo.commit(selected)
        except VibemitError as e:
            print("Failed to create commit:", file=sys.stderr)
            print(str(e), file=sys.stderr)
            return 1
        if output:
            print(output)
        return 0

    def _select_candidate(self, candidates: List[str]) -> str:
        print("Select a commit message:")
        for index, candidate in enumerate(candidates, start=1):
            print(f"  {index}) {format_for_display(candidate)}")
        while True:
            try:
                answer = input(f"Choice [1-{len(candidates)}, default 1]: ").strip()
            except EOFError:
                raise KeyboardInterrupt from None
            if not answer:
                return candidates[0]
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                return candidates[int(answer) - 1]
            print(f"Please enter a number between 1 and {len(candidates)}.")

    @staticmethod
    def _print_error(error: Exception) -> None:
        print(f"Error: {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
