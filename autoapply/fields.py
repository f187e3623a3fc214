"""Field descriptors and the portal's form vocabulary.

Defaults target Dutch application forms. ``config/labels.yaml`` can replace
any synonym list; a string starting with ``re:`` is compiled as a
case-insensitive regular expression, everything else is matched as a
literal substring.

Example::

    fields:
      phone: ["Telefoonnummer", "re:^Mobiel"]
    submit_label: Verstuur
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from autoapply.config import LABELS_PATH, load_yaml
from autoapply.log import get_logger
from autoapply.models import FieldDescriptor, FieldKind, Synonym

log = get_logger(__name__)

_REGEX_PREFIX = "re:"

CV_UPLOAD = FieldDescriptor(
    name="cv_file",
    synonyms=(re.compile(r"CV uploaden|CV|Upload", re.I),),
    kind=FieldKind.FILE,
    fallback_selector="input[type='file']",
)

# Fill order matters: it is the order fields are visited on every form.
DEFAULT_FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor("first_name", ("Voornaam",)),
    FieldDescriptor("middle_name", ("Tussenvoegsel",)),
    FieldDescriptor("last_name", ("Achternaam",)),
    FieldDescriptor("email", ("E-mailadres", "E-mail", "Email")),
    FieldDescriptor(
        "phone",
        ("Telefoonnummer", "Telefoon", "Mobiel"),
        kind=FieldKind.PHONE,
        fallback_selector="input[type='tel']",
    ),
    FieldDescriptor("city", ("Woonplaats", "Plaats", "Stad")),
    FieldDescriptor("postal_code", ("Postcode", "Post code", "Zip")),
    FieldDescriptor(
        "motivation",
        ("Motivatiebrief", "Toelichting", "Motivatie", "Motivatiebrief / Toelichting"),
        fallback_selector="textarea",
    ),
)


@dataclass(frozen=True)
class FormVocabulary:
    """Everything the engine needs to know about a portal's wording."""

    fields: tuple[FieldDescriptor, ...] = DEFAULT_FIELDS
    cv_upload: FieldDescriptor = CV_UPLOAD
    apply_label: str = "Solliciteer"
    submit_label: str = "Solliciteer"
    consent_yes_label: str = "Ja"
    privacy_label: str = "privacyverklaring"
    cookie_labels: tuple[str, ...] = ("Alles accepteren", "Akkoord", "Accepteren", "Accept")

    def descriptor(self, name: str) -> FieldDescriptor | None:
        for d in self.fields:
            if d.name == name:
                return d
        return None

    def form_signals(self) -> tuple[Synonym, ...]:
        """Labels whose appearance means the application form is on screen."""
        signals: list[Synonym] = []
        for name in ("first_name", "last_name"):
            d = self.descriptor(name)
            if d and d.synonyms:
                signals.append(d.synonyms[0])
        return tuple(signals)


def parse_synonym(raw: str) -> Synonym:
    if raw.startswith(_REGEX_PREFIX):
        return re.compile(raw[len(_REGEX_PREFIX):], re.I)
    return raw


def _parse_synonyms(name: str, raw: Any) -> tuple[Synonym, ...]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not raw:
        raise ValueError(f"labels.yaml: '{name}' needs a non-empty list of labels")
    return tuple(parse_synonym(str(item)) for item in raw)


def build_vocabulary(overrides: dict[str, Any] | None = None) -> FormVocabulary:
    """Apply a parsed ``labels.yaml`` mapping on top of the defaults."""
    vocab = FormVocabulary()
    if not overrides:
        return vocab

    field_overrides: dict[str, Any] = overrides.get("fields") or {}
    fields: list[FieldDescriptor] = []
    for d in vocab.fields:
        if d.name in field_overrides:
            d = replace(d, synonyms=_parse_synonyms(d.name, field_overrides[d.name]))
        fields.append(d)
    unknown = set(field_overrides) - {d.name for d in vocab.fields} - {"cv_file"}
    if unknown:
        log.warning("labels.yaml: ignoring unknown field(s): %s", ", ".join(sorted(unknown)))

    cv_upload = vocab.cv_upload
    if "cv_file" in field_overrides:
        cv_upload = replace(cv_upload, synonyms=_parse_synonyms("cv_file", field_overrides["cv_file"]))

    changes: dict[str, Any] = {"fields": tuple(fields), "cv_upload": cv_upload}
    for key in ("apply_label", "submit_label", "consent_yes_label", "privacy_label"):
        if overrides.get(key):
            changes[key] = str(overrides[key])
    if overrides.get("cookie_labels"):
        changes["cookie_labels"] = tuple(str(c) for c in overrides["cookie_labels"])
    return replace(vocab, **changes)


def load_vocabulary(path: Path = LABELS_PATH) -> FormVocabulary:
    vocab = build_vocabulary(load_yaml(path))
    if path.exists():
        log.info("Loaded form labels from %s", path.name)
    return vocab
