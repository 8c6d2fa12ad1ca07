"""Lookup orchestrator: barcode in, scored and aggregated albums out.

``lookup_and_score`` fans out to both catalog sources in parallel, merges
their candidates, then runs the synchronous pipeline
(normalize -> group -> score -> aggregate). ``rescore_releases`` runs the
same pipeline on candidates captured earlier, without fetching.

Nothing here raises on bad input or upstream failure: every problem ends up
in the result's ``errors`` list.
"""

import asyncio
import logging
from collections.abc import Sequence

from posthog import Posthog
from pydantic import ValidationError

from core.dependencies import get_config_store, get_posthog_client
from core.exceptions import CatalogSourceError
from core.sentry import add_catalog_breadcrumb, capture_exception
from core.telemetry import RequestTelemetry
from lookup.models import LookupResult, RescoreResult, ScoringDetail
from lookup.sources import DISCOGS_ADAPTER, MUSICBRAINZ_ADAPTER, CatalogClient, SourceAdapter
from scoring.aggregate import build_albums
from scoring.config import ScoringConfig, ScoringConfigStore
from scoring.grouping import normalize_and_group
from scoring.models import Album, RawCandidate
from scoring.score import score_candidate

logger = logging.getLogger(__name__)

BARCODE_REQUIRED = "Barcode is required"
NO_RELEASES_FOUND = "No releases found for this barcode"
NO_RELEASES_TO_SCORE = "No releases to score"


def resolve_config(
    config: ScoringConfig | None = None,
    config_store: ScoringConfigStore | None = None,
) -> ScoringConfig:
    """Explicit config wins; otherwise the (shared) store's cached config."""
    if config is not None:
        return config
    store = config_store or get_config_store()
    return store.get()


# =============================================================================
# Fetching
# =============================================================================


def _parse_hits(adapter: SourceAdapter, payloads) -> list:
    if payloads is None:
        return []
    if not isinstance(payloads, list | tuple):
        raise CatalogSourceError(
            f"expected a list of search hits, got {type(payloads).__name__}",
            details={"source": adapter.name},
        )

    hits = []
    for index, payload in enumerate(payloads):
        try:
            hits.append(adapter.parse_hit(payload))
        except ValidationError as e:
            raise CatalogSourceError(
                f"malformed search hit at index {index} ({e.error_count()} validation errors)",
                details={"source": adapter.name, "errors": e.errors()},
            ) from e
    return hits


async def _fetch_detail(
    adapter: SourceAdapter,
    client: CatalogClient,
    external_id: str,
    telemetry: RequestTelemetry | None,
):
    """Best-effort detail fetch; failures degrade the candidate to search fields."""
    add_catalog_breadcrumb(adapter.name, "get_release_details", {"external_id": external_id})
    if telemetry:
        telemetry.record_api_call(adapter.name)

    try:
        return adapter.parse_detail(await client.get_release_details(external_id))
    except Exception as e:
        logger.warning(f"{adapter.display_name} details fetch failed for {external_id}: {e}")
        return None


async def fetch_source_candidates(
    adapter: SourceAdapter,
    client: CatalogClient,
    barcode: str,
    telemetry: RequestTelemetry | None = None,
) -> tuple[list[RawCandidate], list[str]]:
    """Search one catalog by barcode and build a candidate per hit.

    Detail fetches run one after another. A failure of the search itself
    discards the whole source and is reported as ``"<Source> error: ..."``.

    Returns:
        Tuple of (candidates, errors)
    """
    add_catalog_breadcrumb(adapter.name, "search_by_barcode", {"barcode": barcode})
    if telemetry:
        telemetry.record_api_call(adapter.name)

    try:
        hits = _parse_hits(adapter, await client.search_by_barcode(barcode))
        logger.info(f"{adapter.display_name}: found {len(hits)} results for barcode {barcode}")

        candidates = []
        for hit in hits:
            external_id = adapter.release_id(hit)
            if external_id is None:
                logger.debug(f"{adapter.display_name}: skipping search hit without release id")
                continue
            detail = await _fetch_detail(adapter, client, external_id, telemetry)
            candidates.append(adapter.build_candidate(barcode, hit, detail))

    except Exception as e:
        message = f"{adapter.display_name} error: {e}"
        logger.error(message)
        add_catalog_breadcrumb(adapter.name, "search_failed", {"error": str(e)}, level="error")
        return [], [message]

    return candidates, []


async def fetch_all_candidates(
    barcode: str,
    *,
    discogs_client: CatalogClient | None = None,
    musicbrainz_client: CatalogClient | None = None,
    telemetry: RequestTelemetry | None = None,
) -> tuple[list[RawCandidate], list[str]]:
    """Query every configured catalog in parallel and merge the results.

    MusicBrainz candidates come first, then Discogs. A source without a
    client is skipped.
    """
    sources = [
        (MUSICBRAINZ_ADAPTER, musicbrainz_client),
        (DISCOGS_ADAPTER, discogs_client),
    ]
    active = []
    for adapter, client in sources:
        if client is None:
            logger.debug(f"No {adapter.display_name} client configured, skipping source")
            continue
        active.append((adapter, client))

    results = await asyncio.gather(
        *[
            fetch_source_candidates(adapter, client, barcode, telemetry)
            for adapter, client in active
        ]
    )

    candidates: list[RawCandidate] = []
    errors: list[str] = []
    counts = []
    for (adapter, _), (source_candidates, source_errors) in zip(active, results, strict=True):
        candidates.extend(source_candidates)
        errors.extend(source_errors)
        counts.append(f"{adapter.display_name}: {len(source_candidates)}")

    logger.info(
        f"Total candidates fetched: {len(candidates)} ({', '.join(counts) or 'no sources'})"
    )
    return candidates, errors


# =============================================================================
# Scoring and aggregation
# =============================================================================


def generate_scoring_details(
    raw_candidates: Sequence[RawCandidate], config: ScoringConfig
) -> list[ScoringDetail]:
    """Score every candidate for the audit trace, in group order."""
    details = []
    for group in normalize_and_group(list(raw_candidates), config):
        for candidate in group.candidates:
            result = score_candidate(candidate, config)
            breakdown = result.breakdown
            details.append(
                ScoringDetail(
                    candidate_id=result.candidate_id,
                    external_id=result.external_id,
                    source=result.source,
                    grouping_key=group.grouping_key,
                    total_score=result.total_score,
                    breakdown=breakdown,
                    media_type_score=breakdown.media_type,
                    country_score=breakdown.country,
                    completeness_score=(
                        breakdown.track_list + breakdown.cover_art + breakdown.label_info
                    ),
                    applied_rules=result.applied_rules,
                )
            )
    return details


def aggregate_candidates(
    raw_candidates: Sequence[RawCandidate], config: ScoringConfig
) -> list[Album]:
    groups = normalize_and_group(list(raw_candidates), config)
    logger.info(f"Created {len(groups)} album group(s) from {len(raw_candidates)} candidates")
    return build_albums(groups, config)


def rescore_releases(
    raw_candidates: Sequence[RawCandidate],
    config: ScoringConfig | None = None,
    *,
    config_store: ScoringConfigStore | None = None,
) -> RescoreResult:
    """Re-run scoring and aggregation on previously fetched candidates.

    Used to tune the scoring config against captured data. Given the same
    candidates and config, the albums equal those of ``lookup_and_score``.
    """
    if not raw_candidates:
        return RescoreResult(errors=[NO_RELEASES_TO_SCORE])

    cfg = resolve_config(config, config_store)
    return RescoreResult(
        albums=aggregate_candidates(raw_candidates, cfg),
        raw_candidates=list(raw_candidates),
        scoring_details=generate_scoring_details(raw_candidates, cfg),
    )


# =============================================================================
# Lookup
# =============================================================================


def _send_telemetry(
    telemetry: RequestTelemetry,
    posthog_client: Posthog,
    result: LookupResult,
) -> None:
    try:
        telemetry.send_to_posthog(
            posthog_client,
            {
                "albums_count": len(result.albums),
                "candidates_count": len(result.raw_candidates),
                "errors_count": len(result.errors),
            },
        )
    except Exception as e:
        logger.warning(f"Failed to send telemetry: {e}")


async def lookup_and_score(
    barcode: str,
    config: ScoringConfig | None = None,
    *,
    discogs_client: CatalogClient | None = None,
    musicbrainz_client: CatalogClient | None = None,
    config_store: ScoringConfigStore | None = None,
    telemetry: RequestTelemetry | None = None,
    posthog_client: Posthog | None = None,
) -> LookupResult:
    """Look up a barcode in both catalogs and return scored, aggregated albums.

    Args:
        barcode: Scanned barcode; surrounding whitespace is ignored
        config: Scoring config for this lookup (defaults to the store's config)
        discogs_client: Discogs catalog client, or None to skip Discogs
        musicbrainz_client: MusicBrainz catalog client, or None to skip MusicBrainz
        config_store: Store to resolve the config from (defaults to the shared store)
        telemetry: Step timer and API call counter (a fresh one by default)
        posthog_client: Client for telemetry events (defaults to the shared client,
            which is None when telemetry is disabled)

    Returns:
        LookupResult with albums, raw candidates, scoring trace, errors and timing
    """
    telemetry = telemetry or RequestTelemetry()

    if not barcode or not barcode.strip():
        return LookupResult(
            errors=[BARCODE_REQUIRED],
            processing_time_ms=telemetry.get_total_duration_ms(),
        )

    barcode = barcode.strip()
    raw_candidates: list[RawCandidate] = []
    scoring_details: list[ScoringDetail] = []
    albums: list[Album] = []
    errors: list[str] = []

    try:
        cfg = resolve_config(config, config_store)

        with telemetry.track_step("catalog_fetch"):
            raw_candidates, fetch_errors = await fetch_all_candidates(
                barcode,
                discogs_client=discogs_client,
                musicbrainz_client=musicbrainz_client,
                telemetry=telemetry,
            )
        errors.extend(fetch_errors)

        if not raw_candidates:
            if not errors:
                errors.append(NO_RELEASES_FOUND)
        else:
            with telemetry.track_step("scoring_trace"):
                scoring_details = generate_scoring_details(raw_candidates, cfg)
            with telemetry.track_step("aggregation"):
                albums = aggregate_candidates(raw_candidates, cfg)

    except Exception as e:
        logger.exception(f"Unexpected error during lookup for barcode {barcode}")
        capture_exception(e, {"barcode": barcode})
        errors.append(f"Unexpected error during lookup: {e}")

    result = LookupResult(
        albums=albums,
        raw_candidates=raw_candidates,
        errors=errors,
        scoring_details=scoring_details,
        processing_time_ms=telemetry.get_total_duration_ms(),
        step_timings=telemetry.get_step_timings(),
    )
    logger.info(
        f"Barcode lookup for {barcode} completed in {result.processing_time_ms:.0f}ms "
        f"({len(albums)} album(s), {len(errors)} error(s))"
    )

    posthog_client = posthog_client or get_posthog_client()
    if posthog_client:
        _send_telemetry(telemetry, posthog_client, result)

    return result
