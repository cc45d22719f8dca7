"""Fix request composer: turns a review into developer instructions. Zero LLM calls."""

from core.schemas import ReviewResult

_SEVERITY_ORDER = {"critical": 0, "major": 1, "minor": 2}


def compose_fix_request(review: ReviewResult) -> str:
    """Format every review issue plus the general feedback as one request.

    Issues are listed critical first, then major, then minor, and by file
    within a severity. The developer is asked for a complete replacement
    project, not a patch.
    """
    issues = sorted(
        review.issues,
        key=lambda i: (_SEVERITY_ORDER[i.severity], i.file),
    )

    lines = ["Fix the following code review issues:\n"]
    if not issues:
        lines.append("(no individual issues were listed)\n")
    for idx, issue in enumerate(issues, 1):
        lines.append(
            f"{idx}. [{issue.severity.upper()}] {issue.location}\n"
            f"   Problem: {issue.description}\n"
            f"   Fix: {issue.suggestion}\n"
        )

    lines.append(f"GENERAL FEEDBACK:\n{review.general_feedback or '(none)'}\n")
    lines.append(
        "Fix every issue and return the COMPLETE updated project in the same JSON "
        "format: every file, not only the changed ones. Make sure all critical and "
        "major problems are resolved."
    )
    return "\n".join(lines)
