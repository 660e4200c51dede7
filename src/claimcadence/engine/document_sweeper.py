"""
ClaimCadence Document Sweeper

Classifies a bounded batch of unclassified files per tick. Images are
labelled "photo" locally; everything else goes to the classification
collaborator. A failed file stays unclassified and is picked up again on
a later tick.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..collaborators import DocumentClassifier
from ..config import EngineRules
from ..exceptions import ClassificationError
from ..models import ClaimFile
from ..store import ClaimStore

logger = logging.getLogger(__name__)

PHOTO_LABEL = "photo"


@dataclass
class DocumentSweeper:
    store: ClaimStore
    classifier: Optional[DocumentClassifier] = None
    rules: EngineRules = field(default_factory=EngineRules)

    def run(self, claim_ids: Sequence[str], now: datetime) -> int:
        """Classify up to the batch size; returns the number of files processed."""
        if not claim_ids:
            return 0
        # Without a classifier only images can be labelled, so only fetch those
        files = self.store.list_unclassified_files(
            claim_ids,
            self.rules.document_batch_size,
            images_only=self.classifier is None,
        )
        logger.info("Found %d unprocessed documents across %d claims", len(files), len(claim_ids))

        processed = 0
        for file in files:
            if self._process(file, now):
                processed += 1
        return processed

    def _process(self, file: ClaimFile, now: datetime) -> bool:
        if file.is_image:
            self.store.record_classification(
                file.id,
                PHOTO_LABEL,
                1.0,
                {"method": "file_type", "summary": "Photo file"},
                now,
            )
            return True

        if self.classifier is None:
            logger.debug("No classifier configured, leaving %s unclassified", file.file_name)
            return False

        try:
            result = self.classifier.classify(file.id)
        except ClassificationError as e:
            logger.error("Failed to classify %s: %s", file.file_name, e.message)
            return False

        self.store.record_classification(
            file.id, result.label, result.confidence, result.metadata, now
        )
        logger.info(
            "Processed %s: %s (%d%%)",
            file.file_name, result.label, round(result.confidence * 100),
        )
        return True
