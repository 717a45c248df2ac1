"""Result reconciler: collapses duplicate postings of the same event.

The same performance is often scraped from several sources.  Records that
share an identity key ``(artist.strip().lower(), date, time)`` are the
same real-world event; exactly one survives.

Algorithm (order-sensitive, keep it exactly like this):

  1. Stable pre-sort by (date asc, verified desc, has sourceURL desc).
  2. Walk the sorted list, keeping the first record seen per key.  That
     record is therefore the verified-first, sourced-first candidate.
  3. Stable re-sort of the survivors by date asc for presentation.

Records are selected, never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable

from duende.models.event import Event


def _priority(event: Event) -> tuple[str, bool, bool]:
    # False sorts before True, so negate the "prefer" flags.
    return (event.date, not event.verified, not event.has_source)


def reconcile_events(events: Iterable[Event]) -> list[Event]:
    """Return one canonical record per identity key, ascending by date."""
    seen: set[tuple[str, str, str | None]] = set()
    kept: list[Event] = []
    for event in sorted(events, key=_priority):
        key = event.identity_key
        if key in seen:
            continue
        seen.add(key)
        kept.append(event)
    kept.sort(key=lambda e: e.date)
    return kept
