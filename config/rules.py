"""Minimum-shape rules a generated project must satisfy before it is written."""

import re

# Paths that must be present verbatim. Missing any of these is fatal.
REQUIRED_FILES = [
    "package.json",
    "tsconfig.json",
    "next.config.js",
    "tailwind.config.js",
    "prisma/schema.prisma",
    ".env.example",
]

# Each entry: (pattern_regex, description). A pattern with no matching
# path only produces a warning.
REQUIRED_PATTERNS = [
    (re.compile(r"^app/layout\.tsx$"), "root layout"),
    (re.compile(r"^app/page\.tsx$"), "home page"),
    (re.compile(r"^app/globals\.css$"), "global stylesheet"),
    (re.compile(r"^app/api/.+/route\.ts$"), "API route"),
    (re.compile(r"^components/.+\.tsx$"), "component"),
    (re.compile(r"^lib/.+\.ts$"), "lib module"),
]

MIN_FILES = 15

# Dependency manifests that must pin every version, and the marker that
# means a version was left floating.
PINNED_MANIFESTS = ["package.json"]
UNPINNED_MARKER = '"latest"'
