"""
Subject Vocabulary
==================

Term-weight table and per-subject keyword lists used by embedding and
reranking. The tables live in JSON so they can be extended without
touching the scoring code.
"""

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from exam_rag.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_VOCABULARY_RESOURCE = "subject_vocabulary.json"


@dataclass(frozen=True)
class SubjectProfile:
    """
    Vocabulary for one subject domain.

    Attributes:
        name: Lower-case subject name, matched against document subjects
        term_weights: Importance weight per term (>= 1)
        keywords: Terms counted for subject scores and query detection
    """
    name: str
    term_weights: Dict[str, float] = field(default_factory=dict)
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SubjectVocabulary:
    """General study terms plus subject profiles, in a fixed order."""
    general_terms: Dict[str, float]
    subjects: List[SubjectProfile]

    @property
    def term_weights(self) -> Dict[str, float]:
        """All weighted terms in embedding order (first occurrence wins)."""
        weights: Dict[str, float] = dict(self.general_terms)
        for subject in self.subjects:
            for term, weight in subject.term_weights.items():
                weights.setdefault(term, weight)
        return weights

    @property
    def subject_names(self) -> List[str]:
        return [subject.name for subject in self.subjects]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubjectVocabulary":
        """
        Build a vocabulary from parsed JSON.

        Raises:
            ConfigurationError: If the structure or weights are invalid
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Vocabulary must be a JSON object")

        general_terms = _parse_weights(data.get("general_terms") or {}, "general_terms")

        raw_subjects = data.get("subjects")
        if not isinstance(raw_subjects, list) or not raw_subjects:
            raise ConfigurationError("Vocabulary needs a non-empty 'subjects' list")

        subjects = []
        seen = set()
        for raw in raw_subjects:
            if not isinstance(raw, Mapping) or not raw.get("name"):
                raise ConfigurationError("Every subject needs a 'name'", {"subject": raw})

            name = str(raw["name"]).strip().lower()
            if name in seen:
                raise ConfigurationError(f"Duplicate subject '{name}'")
            seen.add(name)

            keywords = [str(k).strip().lower() for k in raw.get("keywords") or [] if str(k).strip()]
            if not keywords:
                raise ConfigurationError(f"Subject '{name}' has no keywords")

            subjects.append(SubjectProfile(
                name=name,
                term_weights=_parse_weights(raw.get("term_weights") or {}, name),
                keywords=keywords,
            ))

        return cls(general_terms=general_terms, subjects=subjects)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SubjectVocabulary":
        """Load a vocabulary from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read vocabulary file: {e}", {"path": str(path)}) from e

        vocabulary = cls.from_dict(data)
        logger.info(
            f"[vocabulary] Loaded {len(vocabulary.term_weights)} terms, "
            f"{len(vocabulary.subjects)} subjects from {path}"
        )
        return vocabulary

    @classmethod
    def default(cls) -> "SubjectVocabulary":
        """The packaged study vocabulary."""
        text = (
            resources.files("exam_rag.indexing.ingestor")
            .joinpath("data")
            .joinpath(DEFAULT_VOCABULARY_RESOURCE)
            .read_text(encoding="utf-8")
        )
        return cls.from_dict(json.loads(text))


def load_vocabulary(path: Optional[Union[str, Path]] = None) -> SubjectVocabulary:
    """Load a vocabulary from path, or the packaged default when None."""
    if path:
        return SubjectVocabulary.from_file(path)
    return SubjectVocabulary.default()


def _parse_weights(raw: Any, owner: str) -> Dict[str, float]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Term weights for '{owner}' must be an object")

    weights = {}
    for term, weight in raw.items():
        try:
            value = float(weight)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Weight for '{term}' in '{owner}' is not a number") from e
        if value < 1.0:
            raise ConfigurationError(f"Weight for '{term}' in '{owner}' must be >= 1")
        weights[str(term).strip().lower()] = value
    return weights
