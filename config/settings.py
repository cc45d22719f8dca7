"""Environment-driven settings: API key, models, output directory, revisions.

Values are read from the process environment after loading a local `.env`.
Every per-role model falls back to DEFAULT_MODEL, which falls back to
DEFAULTS["model"].
"""

import os

from dotenv import load_dotenv

from config.defaults import DEFAULTS
from core.state import AgentRole, PHASE_ROLES

load_dotenv()

# Env var holding the model override for each agent role.
MODEL_ENV_VARS = {
    AgentRole.REQUIREMENTS_ANALYST: "MODEL_REQUIREMENTS_ANALYST",
    AgentRole.DESIGNER: "MODEL_DESIGNER",
    AgentRole.DEVELOPER: "MODEL_DEVELOPER",
    AgentRole.REVIEWER: "MODEL_REVIEWER",
    AgentRole.TESTER: "MODEL_TESTER",
}


def default_model():
    return os.environ.get("DEFAULT_MODEL") or DEFAULTS["model"]


def output_dir():
    return os.environ.get("OUTPUT_DIR") or DEFAULTS["output_dir"]


def clamp_revisions(value):
    """Clamp a requested revision budget into [0, hard_max_revisions]."""
    hard_max = DEFAULTS["hard_max_revisions"]
    return max(0, min(int(value), hard_max))


def max_revisions():
    raw = os.environ.get("MAX_REVISIONS")
    if not raw:
        return DEFAULTS["max_revisions"]
    try:
        return clamp_revisions(raw)
    except ValueError:
        raise ValueError(f"MAX_REVISIONS must be an integer, got {raw!r}") from None


def get_agent_model(role: AgentRole):
    """Return the model override configured for `role`, or None."""
    env_var = MODEL_ENV_VARS.get(role)
    if not env_var:
        return None
    return os.environ.get(env_var) or None


def load_agent_models():
    """Return the effective model for every phase role."""
    fallback = default_model()
    return {role: get_agent_model(role) or fallback for role in PHASE_ROLES}


def describe_config():
    """Return a JSON-safe summary of the effective configuration."""
    models = {}
    for role, model in load_agent_models().items():
        models[role.value] = {
            "model": model,
            "source": "role" if get_agent_model(role) else "default",
        }
    return {
        "api_key_set": bool(os.environ.get("ANTHROPIC_API_KEY")),
        "default_model": default_model(),
        "output_dir": output_dir(),
        "max_revisions": max_revisions(),
        "hard_max_revisions": DEFAULTS["hard_max_revisions"],
        "models": models,
    }
