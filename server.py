#!/usr/bin/env python3
"""ProductForge web API - run the agent pipeline over HTTP."""

import logging
import os
import threading
import time
import uuid

from flask import Flask, jsonify, request

from config import settings
from core.errors import (
    BackendError,
    ExtractionError,
    PersistenceValidationError,
    PipelineError,
)
from core.orchestrator import AGENT_CLASSES, Orchestrator

logger = logging.getLogger(__name__)

app = Flask(__name__)
history = []

# Finished pipeline runs keyed by job_id: {id: {"result": ..., "created": timestamp}}
_jobs = {}
_jobs_lock = threading.Lock()
_MAX_JOBS = 50  # prevent unbounded memory growth
_JOB_TTL = 3600  # expire jobs after 1 hour

_ERROR_STATUS = {
    BackendError: 502,
    ExtractionError: 422,
    PersistenceValidationError: 422,
}


def _cleanup_jobs():
    """Remove expired jobs. Called under _jobs_lock."""
    now = time.time()
    expired = [jid for jid, job in _jobs.items() if now - job["created"] > _JOB_TTL]
    for jid in expired:
        del _jobs[jid]
    # If still over limit, remove oldest
    if len(_jobs) > _MAX_JOBS:
        by_age = sorted(_jobs.items(), key=lambda x: x[1]["created"])
        for jid, _ in by_age[:len(_jobs) - _MAX_JOBS]:
            del _jobs[jid]


def _store_job(result):
    """Store a job result and return its ID."""
    job_id = str(uuid.uuid4())[:8]
    with _jobs_lock:
        _cleanup_jobs()
        _jobs[job_id] = {"result": result, "created": time.time()}
    return job_id


def _get_job(job_id):
    """Get the stored result for a job ID, or None if not found/expired."""
    with _jobs_lock:
        job = _jobs.get(job_id)
    if not job:
        return None
    if time.time() - job["created"] > _JOB_TTL:
        with _jobs_lock:
            _jobs.pop(job_id, None)
        return None
    return job["result"]


def _state_to_dict(state):
    """Serialize WorkflowState to a JSON-safe dict."""
    return {
        "phase": state.phase.value,
        "project_name": state.requirements.project_name if state.requirements else None,
        "specification": state.requirements.to_json_dict() if state.requirements else None,
        "design": state.design.to_json_dict() if state.design else None,
        "files": state.codebase.paths if state.codebase else [],
        "review": state.review.to_json_dict() if state.review else None,
        "test_result": state.test_result.to_json_dict() if state.test_result else None,
        "revision_count": state.revision_count,
        "max_revisions": state.max_revisions,
        "review_attempts": state.review_attempts,
        "project_path": state.project_path or None,
    }


@app.route("/api/agents")
def api_agents():
    agents = [
        {"role": role.value, "name": cls.name, "description": (cls.__doc__ or "").strip().split("\n")[0]}
        for role, cls in AGENT_CLASSES.items()
    ]
    return jsonify(agents)


@app.route("/api/config")
def api_config():
    return jsonify(settings.describe_config())


@app.route("/api/create", methods=["POST"])
def api_create():
    """Run the full pipeline synchronously and store the outcome as a job."""
    data = request.get_json(silent=True)
    if not data or not str(data.get("idea", "")).strip():
        return jsonify({"error": "Missing idea"}), 400

    idea = str(data["idea"]).strip()
    extra = str(data.get("requirements") or "")
    max_revisions = data.get("max_revisions")
    if max_revisions is not None:
        try:
            max_revisions = settings.clamp_revisions(max_revisions)
        except (TypeError, ValueError):
            return jsonify({"error": "max_revisions must be an integer"}), 400

    orchestrator = Orchestrator(max_revisions=max_revisions)
    requirements = orchestrator.create_requirements(idea, extra)

    status = 200
    try:
        orchestrator.run(requirements)
        error = None
    except PipelineError as e:
        logger.error("Pipeline for %r failed: %s", idea, e)
        status = next(
            (code for error_type, code in _ERROR_STATUS.items() if isinstance(e, error_type)),
            500,
        )
        error = str(e)

    result = _state_to_dict(orchestrator.state)
    result["idea"] = idea
    result["error"] = error
    result["messages"] = orchestrator.messages.summary()
    result["job_id"] = _store_job(result)

    history.append(result)
    return jsonify(result), status


@app.route("/api/status/<job_id>")
def api_status(job_id):
    """Look up the outcome of a finished run."""
    result = _get_job(job_id)
    if not result:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(result)


@app.route("/api/history")
def api_history():
    return jsonify(history)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5001))
    print(f"ProductForge API running at http://localhost:{port}")
    app.run(debug=False, port=port)
