"""Match persistence: an in-memory store and a JSON-file store."""
from __future__ import annotations

import json
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from .engine import determine_outcome
from .errors import NotFoundError, ValidationError
from .models import MATCH_STATUSES, STATUS_IN_PROGRESS, Match, SetRecord, SetScore
from .rules import DEFAULT_FORMAT, MatchFormat

LOGGER = logging.getLogger(__name__)


class MatchStore:
    """Shared behaviour for match stores.

    Subclasses provide ``_load`` and ``_save`` for the raw match documents.
    Callers wrap read-modify-write sequences in :meth:`transaction` so that
    concurrent updates to the same store are serialized.
    """

    def __init__(self, *, match_format: MatchFormat = DEFAULT_FORMAT) -> None:
        self.match_format = match_format
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, Dict[str, object]]:
        raise NotImplementedError

    def _save(self, documents: Dict[str, Dict[str, object]]) -> None:
        raise NotImplementedError

    @contextmanager
    def transaction(self) -> Iterator["MatchStore"]:
        with self._lock:
            yield self

    def _from_document(self, document: Dict[str, object]) -> Match:
        match = Match.from_mapping(document)
        status, final_score = determine_outcome(match.sets, self.match_format)
        if status != match.status:
            LOGGER.warning(
                "Stored status %s of match %s disagrees with its sets; using %s",
                match.status,
                match.match_id,
                status,
            )
        return replace(match, status=status, final_score=final_score)

    def create_match(self, team_id: str, opponent: str, match_date: date) -> Match:
        if not team_id.strip() or not opponent.strip():
            raise ValidationError("A match needs a team and an opponent.")
        match = Match(
            match_id=uuid.uuid4().hex,
            team_id=team_id.strip(),
            opponent=opponent.strip(),
            date=match_date,
        )
        with self.transaction():
            documents = self._load()
            documents[match.match_id] = match.to_dict()
            self._save(documents)
        LOGGER.info("Created match %s: %s vs %s", match.match_id, match.team_id, match.opponent)
        return match

    def get_match(self, match_id: str) -> Match:
        with self.transaction():
            document = self._load().get(match_id)
        if document is None:
            raise NotFoundError(f"Match {match_id} not found")
        return self._from_document(document)

    def list_matches(self, team_id: Optional[str] = None) -> List[Match]:
        with self.transaction():
            documents = list(self._load().values())
        matches = [self._from_document(document) for document in documents]
        if team_id is not None:
            matches = [match for match in matches if match.team_id == team_id]
        matches.sort(key=lambda match: (match.date, match.match_id))
        return matches

    def replace_match_sets(
        self,
        match_id: str,
        sets: Sequence[SetRecord],
        status: str,
        final_score: Optional[SetScore],
    ) -> Match:
        if status not in MATCH_STATUSES:
            raise ValueError(f"Unknown match status: {status!r}")
        with self.transaction():
            documents = self._load()
            document = documents.get(match_id)
            if document is None:
                raise NotFoundError(f"Match {match_id} not found")
            match = replace(
                Match.from_mapping(document),
                sets=tuple(sorted(sets, key=lambda record: record.number)),
                status=status,
                final_score=final_score if status != STATUS_IN_PROGRESS else None,
            )
            documents[match_id] = match.to_dict()
            self._save(documents)
        return match

    def delete_match(self, match_id: str) -> None:
        with self.transaction():
            documents = self._load()
            if documents.pop(match_id, None) is None:
                raise NotFoundError(f"Match {match_id} not found")
            self._save(documents)
        LOGGER.info("Deleted match %s", match_id)


class InMemoryMatchStore(MatchStore):
    def __init__(self, *, match_format: MatchFormat = DEFAULT_FORMAT) -> None:
        super().__init__(match_format=match_format)
        self._documents: Dict[str, Dict[str, object]] = {}

    def _load(self) -> Dict[str, Dict[str, object]]:
        return json.loads(json.dumps(self._documents))

    def _save(self, documents: Dict[str, Dict[str, object]]) -> None:
        self._documents = json.loads(json.dumps(documents))


class JsonMatchStore(MatchStore):
    """Stores all matches in a single JSON document on disk.

    Updates are serialized by an in-process lock only.  One process must own
    the file: two CLI invocations or several API workers writing the same
    path concurrently can lose updates.
    """

    def __init__(self, path: Path, *, match_format: MatchFormat = DEFAULT_FORMAT) -> None:
        super().__init__(match_format=match_format)
        self.path = Path(path)

    def _load(self) -> Dict[str, Dict[str, object]]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        matches = payload.get("matches") if isinstance(payload, dict) else None
        if not isinstance(matches, list):
            raise ValueError(f"{self.path} does not contain a 'matches' list.")
        return {
            str(item.get("id")): item
            for item in matches
            if isinstance(item, dict) and item.get("id")
        }

    def _save(self, documents: Dict[str, Dict[str, object]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"matches": list(documents.values())}
        temporary = self.path.with_suffix(self.path.suffix + ".tmp")
        temporary.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        temporary.replace(self.path)


__all__ = ["InMemoryMatchStore", "JsonMatchStore", "MatchStore"]
