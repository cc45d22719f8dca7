#!/usr/bin/env python3
"""ProductForge - turn a one-line product idea into a generated project.

Usage:
    python main.py create --idea "a shared shopping list"             # full pipeline
    python main.py create --idea "..." --requirements "dark mode" --yes
    python main.py create --idea "..." --max-revisions 2 --verbose    # more fix cycles
    python main.py create                                             # prompts for the idea
    python main.py config                                             # show configuration
    python main.py list-agents
"""

import argparse
import logging
import sys

from config import settings
from config.defaults import DEFAULTS
from core.errors import (
    BackendError,
    ExtractionError,
    PersistenceValidationError,
    PipelineError,
)
from core.orchestrator import AGENT_CLASSES, Orchestrator
from core.state import AgentRole

# Display label for every role, including the orchestrator itself.
ROLE_LABELS = {
    AgentRole.REQUIREMENTS_ANALYST: "Requirements Analyst",
    AgentRole.DESIGNER: "Designer",
    AgentRole.DEVELOPER: "Developer",
    AgentRole.REVIEWER: "Code Reviewer",
    AgentRole.TESTER: "QA Tester",
    AgentRole.ORCHESTRATOR: "Orchestrator",
}

_ERROR_HINTS = {
    BackendError: "Check ANTHROPIC_API_KEY and your network connection.",
    ExtractionError: "The model reply could not be decoded; try again or use another model.",
    PersistenceValidationError: "The generated project is incomplete; try again with --max-revisions.",
}


def _ask(question, default=""):
    try:
        answer = input(question).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return default
    return answer or default


def _print_stream_chunk(chunk):
    sys.stdout.write(chunk)
    sys.stdout.flush()


def _format_issues(review):
    lines = []
    for issue in review.issues:
        lines.append(f"  [{issue.severity.upper()}] {issue.location} - {issue.description}")
        if issue.suggestion:
            lines.append(f"           Fix: {issue.suggestion}")
    return "\n".join(lines)


def _print_summary(orchestrator, verbose=False):
    state = orchestrator.state

    print(f"\nProject:    {state.requirements.project_name if state.requirements else '-'}")
    print(f"Phase:      {state.phase.value}")
    print(f"Revisions:  {state.revision_count}/{state.max_revisions}")
    if state.review:
        print(f"Approved:   {'yes' if state.review.approved else 'NO'}")
    if state.test_result:
        result = state.test_result
        print(f"Tests:      {result.passed_count}/{len(result.test_cases)} passed")
        if result.coverage is not None:
            print(f"Coverage:   {result.coverage}%")
    if state.codebase:
        print(f"\nGenerated {len(state.codebase.files)} file(s):")
        for f in state.codebase.files:
            print(f"  {f.path}")

    if verbose and state.review and state.review.issues:
        print("\nOpen review issues:")
        print(_format_issues(state.review))

    summary = orchestrator.messages.summary()
    print(f"\nMessages: {summary['total']}")
    for sender, count in summary["by_sender"].items():
        print(f"  {ROLE_LABELS[AgentRole(sender)]:22s} {count}")


def cmd_create(args):
    """Run the full agent pipeline."""
    idea = args.idea
    extra = args.requirements or ""
    if not idea:
        idea = _ask("Describe your project idea: ")
        if not idea:
            print("A project idea is required.")
            sys.exit(1)
        extra = _ask("Additional requirements (optional): ")

    print(f"\nIdea:         {idea}")
    if extra:
        print(f"Requirements: {extra}")

    if not args.yes:
        answer = _ask("\nStart building the project? [Y/n]: ", default="y").lower()
        if answer not in ("y", "yes"):
            print("Cancelled.")
            return

    orchestrator = Orchestrator(
        max_revisions=args.max_revisions,
        output_dir=args.output_dir,
        on_chunk=_print_stream_chunk if args.stream else None,
    )
    requirements = orchestrator.create_requirements(idea, extra)

    try:
        project_path = orchestrator.run(requirements)
    except PipelineError as e:
        print(f"\nError: {e}", file=sys.stderr)
        for error_type, hint in _ERROR_HINTS.items():
            if isinstance(e, error_type):
                print(hint, file=sys.stderr)
        _print_summary(orchestrator, verbose=args.verbose)
        sys.exit(1)

    _print_summary(orchestrator, verbose=args.verbose)
    print(f"\nOutput:     {project_path}")
    print("\nTo get started:")
    print(f"  cd {project_path}")
    print("  npm install")
    print("  npm run dev")


def cmd_config(args):
    """Show the effective configuration."""
    cfg = settings.describe_config()
    print(f"API key:        {'set' if cfg['api_key_set'] else 'NOT SET'}")
    print(f"Default model:  {cfg['default_model']}")
    print(f"Output dir:     {cfg['output_dir']}")
    print(f"Max revisions:  {cfg['max_revisions']} (hard max {cfg['hard_max_revisions']})")
    print("\nAgent models:")
    for role, info in cfg["models"].items():
        print(f"  {ROLE_LABELS[AgentRole(role)]:22s} {info['model']} ({info['source']})")

    if not cfg["api_key_set"]:
        print("\nANTHROPIC_API_KEY is not set. Add it to your environment or .env:")
        print("  ANTHROPIC_API_KEY=your-key-here")
        print("\n  # Optional per-agent models")
        for env_var in settings.MODEL_ENV_VARS.values():
            print(f"  {env_var}={cfg['default_model']}")
        sys.exit(1)


def cmd_list_agents(args):
    print("Available agents:")
    for role, cls in AGENT_CLASSES.items():
        print(f"  {role.value:22s} - {ROLE_LABELS[role]} ({cls.__name__})")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="productforge",
        description="Multi-agent system that builds a project from a product idea",
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command")

    create_parser = subparsers.add_parser("create", help="Create a new project")
    create_parser.add_argument("-i", "--idea", help="Project idea")
    create_parser.add_argument("-r", "--requirements", help="Additional requirements")
    create_parser.add_argument("--max-revisions", type=int, default=None,
                               help=f"Developer fix cycles after review "
                                    f"(default: {DEFAULTS['max_revisions']}, "
                                    f"max: {DEFAULTS['hard_max_revisions']})")
    create_parser.add_argument("--output-dir", help="Where generated projects are written")
    create_parser.add_argument("--stream", action="store_true",
                               help="Print model replies as they arrive")
    create_parser.add_argument("-y", "--yes", action="store_true",
                               help="Do not ask for confirmation")
    create_parser.add_argument("--verbose", action="store_true",
                               help="Show open review issues in the summary")

    subparsers.add_parser("config", help="Show configuration")
    subparsers.add_parser("list-agents", help="List available agents")

    args = parser.parse_args(argv)
    level = args.log_level
    if getattr(args, "verbose", False) and level == "WARNING":
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "create":
        cmd_create(args)
    elif args.command == "config":
        cmd_config(args)
    elif args.command == "list-agents":
        cmd_list_agents(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
