"""
Moderation Orchestrator - parallel fan-out over the feature services.

The orchestrator:
1. Resolves the requested features to a concrete, ordered list
2. Runs each selected feature's service concurrently
3. Waits for every branch, then fails atomically if any branch failed
4. Merges the results keyed by feature and measures elapsed time

Summarization is skipped for short texts even when requested. There are no
retries and no timeouts at this layer; upstream call behavior governs.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Coroutine, Iterable

from aimod.config import ModerationConfig
from aimod.dispatcher.handlers import InvokeFn
from aimod.schemas.moderation import (
    ALL_FEATURES,
    FeatureName,
    ModerationOptions,
    ModerationResult,
)
from aimod.services.classification import ClassificationService
from aimod.services.sentiment import SentimentService
from aimod.services.summarization import SummarizationService

logger = logging.getLogger(__name__)


def resolve_features(requested: Iterable[str] | None) -> list[FeatureName]:
    """
    Resolve a request's feature list to the features to run.

    Empty, missing, or containing "all" selects every feature. Otherwise the
    requested names are returned once each, in canonical order.
    """
    names = set(requested or ())
    if not names or ALL_FEATURES in names:
        return list(FeatureName)
    return [feature for feature in FeatureName if feature.value in names]


@dataclass
class ModerationOutcome:
    """
    Result of one orchestration run.

    Attributes:
        result: Per-feature results, only for features that ran
        features: Features that were selected for the run
        processing_time_ms: Wall-clock time spent in run()
    """

    result: ModerationResult
    features: list[FeatureName]
    processing_time_ms: float


class ModerationOrchestrator:
    """
    Runs the selected feature services for one text.

    Usage:
        orchestrator = ModerationOrchestrator(invoke, config)
        outcome = await orchestrator.run(text, resolve_features(["all"]))
    """

    def __init__(self, invoke: InvokeFn, config: ModerationConfig) -> None:
        self._config = config
        self.sentiment = SentimentService(invoke, config)
        self.classification = ClassificationService(invoke, config)
        self.summarization = SummarizationService(invoke, config)

    @property
    def config(self) -> ModerationConfig:
        return self._config

    def _branches(
        self,
        text: str,
        features: list[FeatureName],
        options: ModerationOptions,
    ) -> dict[FeatureName, Coroutine[Any, Any, Any]]:
        branches: dict[FeatureName, Coroutine[Any, Any, Any]] = {}

        if FeatureName.SENTIMENT in features:
            branches[FeatureName.SENTIMENT] = self.sentiment.analyze(text)

        if FeatureName.CLASSIFICATION in features:
            branches[FeatureName.CLASSIFICATION] = self.classification.classify(text)

        if FeatureName.SUMMARIZATION in features:
            if self.summarization.should_summarize(text):
                branches[FeatureName.SUMMARIZATION] = self.summarization.summarize(
                    text, options.max_length
                )
            else:
                logger.debug(
                    f"Skipping summarization: {len(text)} chars <= "
                    f"{self._config.summarize_threshold}"
                )

        return branches

    async def run(
        self,
        text: str,
        features: list[FeatureName],
        options: ModerationOptions | None = None,
    ) -> ModerationOutcome:
        """
        Run every selected feature concurrently and merge the results.

        Args:
            text: Text to moderate.
            features: Resolved features (see resolve_features).
            options: Request options; max_length applies to summarization.

        Returns:
            ModerationOutcome with results for the features that ran.

        Raises:
            Exception: The first failure, in feature order, of any branch.
                No partial result is returned.
        """
        start_time = time.perf_counter()
        options = options or ModerationOptions()

        branches = self._branches(text, features, options)
        outcomes = await asyncio.gather(*branches.values(), return_exceptions=True)

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            logger.error(
                f"Moderation failed: {len(failures)} of {len(branches)} feature calls raised"
            )
            raise failures[0]

        result = ModerationResult(
            **{feature.value: outcome for feature, outcome in zip(branches, outcomes)}
        )

        processing_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Moderation completed: features={[f.value for f in branches]}, "
            f"latency={processing_time_ms:.0f}ms"
        )

        return ModerationOutcome(
            result=result,
            features=list(features),
            processing_time_ms=processing_time_ms,
        )
