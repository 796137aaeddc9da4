"""Tests for the externally loaded subject vocabulary."""

import json

import pytest

from exam_rag.core.exceptions import ConfigurationError
from exam_rag.core.processors import SubjectDetector
from exam_rag.indexing.ingestor import SubjectVocabulary, load_vocabulary


class TestSubjectVocabulary:
    """Loading and validating vocabulary tables."""

    def test_packaged_default(self) -> None:
        """Should load the packaged vocabulary with subjects in a fixed order."""
        vocabulary = SubjectVocabulary.default()

        assert vocabulary.subject_names == ["mathematics", "science", "history", "english", "computer science"]
        assert vocabulary.term_weights["equation"] == 2.0
        assert "learn" in vocabulary.general_terms

    def test_load_vocabulary_without_path_uses_default(self) -> None:
        """Should fall back to the packaged vocabulary."""
        assert load_vocabulary(None).subject_names == SubjectVocabulary.default().subject_names

    def test_term_order_general_first(self) -> None:
        """Should list general terms before subject terms."""
        vocabulary = SubjectVocabulary.from_dict({
            "general_terms": {"study": 1.0},
            "subjects": [
                {"name": "A", "term_weights": {"alpha": 2.0, "study": 3.0}, "keywords": ["alpha"]},
                {"name": "B", "term_weights": {"beta": 1.5}, "keywords": ["beta"]},
            ],
        })

        assert list(vocabulary.term_weights.items()) == [("study", 1.0), ("alpha", 2.0), ("beta", 1.5)]
        assert vocabulary.subject_names == ["a", "b"]

    def test_from_file(self, tmp_path) -> None:
        """Should load a custom vocabulary from disk."""
        path = tmp_path / "vocabulary.json"
        path.write_text(json.dumps({
            "general_terms": {},
            "subjects": [{"name": "Music", "term_weights": {"melody": 2}, "keywords": ["melody", "rhythm"]}],
        }), encoding="utf-8")

        vocabulary = load_vocabulary(str(path))

        assert vocabulary.subject_names == ["music"]
        assert vocabulary.subjects[0].keywords == ["melody", "rhythm"]

    def test_missing_file(self, tmp_path) -> None:
        """Should raise ConfigurationError for an unreadable file."""
        with pytest.raises(ConfigurationError):
            SubjectVocabulary.from_file(tmp_path / "missing.json")

    @pytest.mark.parametrize("data", [
        [],
        {"subjects": []},
        {"subjects": [{"keywords": ["x"]}]},
        {"subjects": [{"name": "a", "keywords": []}]},
        {"subjects": [{"name": "a", "keywords": ["x"], "term_weights": {"x": 0.5}}]},
        {"subjects": [{"name": "a", "keywords": ["x"]}, {"name": "A", "keywords": ["y"]}]},
    ])
    def test_invalid_tables(self, data) -> None:
        """Should reject malformed vocabulary data."""
        with pytest.raises(ConfigurationError):
            SubjectVocabulary.from_dict(data)


class TestSubjectDetector:
    """Dominant subject detection for questions."""

    def test_detects_mathematics(self) -> None:
        """Should detect mathematics from 'solve'."""
        assert SubjectDetector().detect("How do I solve 2x+5=15 for x?") == "mathematics"

    def test_no_keywords(self) -> None:
        """Should return None when no subject keyword occurs."""
        assert SubjectDetector().detect("What is the capital of France?") is None

    def test_highest_score_wins(self) -> None:
        """Should pick the subject with the most keyword hits."""
        assert SubjectDetector().detect("Which ancient empire built this trade network?") == "history"

    def test_tie_goes_to_first_subject(self) -> None:
        """Should break ties in vocabulary order."""
        assert SubjectDetector().detect("equation and experiment") == "mathematics"
