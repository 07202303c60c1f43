"""Shared helpers for calling Vertex AI REST endpoints."""

import google.auth
import google.auth.transport.requests

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def get_auth_headers() -> dict:
    """Return request headers carrying a fresh application-default token."""
    credentials, _ = google.auth.default(scopes=SCOPES)
    auth_req = google.auth.transport.requests.Request()
    credentials.refresh(auth_req)
    return {
        "Authorization": f"Bearer {credentials.token}",
        "Content-Type": "application/json",
    }


def model_url(project_id: str, location: str, model: str, method: str) -> str:
    """Build the publisher model endpoint, e.g. ``...models/imagen-3.0:predict``."""
    return (
        f"https://{location}-aiplatform.googleapis.com/v1/"
        f"projects/{project_id}/locations/{location}/"
        f"publishers/google/models/{model}:{method}"
    )
