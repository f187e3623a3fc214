"""Normalize a structured candidate record into a :class:`CandidateProfile`.

Records come from JSON or YAML files in ``resumes/`` and use whatever key
names the author preferred (``givenName``, ``telefoon``, ``cv`` ...).
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from autoapply.errors import CandidateError
from autoapply.log import get_logger
from autoapply.models import CandidateProfile

log = get_logger(__name__)

# Canonical field -> accepted keys, most specific first.
FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "first_name": ("firstName", "givenName"),
    "middle_name": ("middleName", "tussenvoegsel"),
    "last_name": ("lastName", "familyName"),
    "email": ("email", "mail"),
    "phone": ("phone", "telefoon", "mobile"),
    "postal_code": ("postalCode", "zipCode", "postcode"),
    "city": ("city", "woonplaats", "plaats"),
    "motivation": ("motivation", "coverLetter", "toelichting"),
    "cv_file": ("cvFile", "cv", "resumeFile"),
}


def _pick(data: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = data.get(key)
        if value:
            return str(value).strip()
    return ""


def normalize_candidate(data: dict[str, Any]) -> CandidateProfile:
    values = {name: _pick(data, keys) for name, keys in FIELD_KEYS.items()}

    full_name = str(data.get("name") or "").split()
    if not values["first_name"] and full_name:
        values["first_name"] = full_name[0]
    if not values["last_name"] and len(full_name) > 1:
        values["last_name"] = " ".join(full_name[1:])

    return CandidateProfile(**values)


def load_candidate(path: Path) -> CandidateProfile:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise CandidateError(f"Cannot read candidate record {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise CandidateError(f"{path.name}: expected an object at top level")

    profile = normalize_candidate(data)
    log.info("Candidate: %s %s (%s)", profile.first_name, profile.last_name, path.name)
    return profile
