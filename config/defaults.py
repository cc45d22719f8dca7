"""Default pipeline settings."""

DEFAULTS = {
    "max_revisions": 1,
    "hard_max_revisions": 5,    # absolute ceiling, cannot be overridden
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 32768,
    "output_dir": "./generated-projects",
    "tester_preview_chars": 1000,
}
