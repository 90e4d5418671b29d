"""
Write paths for leads: create, update, delete.

Each operation runs its gates in a fixed order and returns an outcome from
core.leads.outcomes instead of raising:

  create:  rate -> validate -> persist (+ "created" history)
  update:  load -> ownership -> rate -> updatedAt match -> validate -> diff -> persist (+ history if diff)
  delete:  load -> ownership -> rate -> delete (history goes with the FK cascade)

The record and its history row are always written in one transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Any, Mapping

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.common.ratelimit import get_rate_limiter, limit_for, rate_limit_key
from core.leads.diff import compute_diff, snapshot
from core.leads.history import record_lead_created, record_lead_history
from core.leads.models import Lead
from core.leads.outcomes import (
    AuthorizationFailed,
    ConcurrencyConflict,
    Deleted,
    NotFound,
    RateLimited,
    StorageFailure,
    Success,
    ValidationFailed,
)
from core.leads.validation import validate_lead

logger = logging.getLogger(__name__)


def check_rate(*, client_key: str, action: str, limiter=None) -> RateLimited | None:
    limiter = limiter or get_rate_limiter()
    limit, window = limit_for(action)
    result = limiter.check(rate_limit_key(client_key or "unknown", action), limit, window)
    if result.allowed:
        return None
    logger.info("rate limited action=%s client=%s", action, client_key)
    return RateLimited(retry_after_seconds=result.retry_after_seconds, reset_at=result.reset_at)


def parse_observed_stamp(value) -> datetime | None:
    """Client-supplied updatedAt -> aware datetime, or None if missing/unreadable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = parse_datetime(value.strip())
        except ValueError:
            return None
    else:
        return None

    if dt is None:
        return None
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, dt_timezone.utc)
    return dt


def _get_lead(lead_id) -> Lead | None:
    try:
        return Lead.objects.filter(id=lead_id).first()
    except (ValueError, DjangoValidationError):
        return None


def insert_lead(*, owner_id: str, data: Mapping[str, Any]) -> Lead:
    """
    Creation path without gates: insert + "created" history.
    Must be called inside transaction.atomic().
    """
    now = timezone.now()
    lead = Lead.objects.create(owner_id=owner_id, created_at=now, updated_at=now, **data)
    record_lead_created(lead=lead, created_by=owner_id)
    return lead


def create_lead(*, owner_id: str, raw: Mapping[str, Any], client_key: str, limiter=None):
    limited = check_rate(client_key=client_key, action="create-lead", limiter=limiter)
    if limited:
        return limited

    result = validate_lead(raw, creating=True)
    if not result.ok:
        return ValidationFailed(errors=result.errors)

    try:
        with transaction.atomic():
            lead = insert_lead(owner_id=owner_id, data=result.data)
    except DatabaseError as exc:
        logger.exception("lead create failed owner=%s", owner_id)
        return StorageFailure(error=str(exc))

    logger.info("lead created id=%s owner=%s", lead.id, owner_id)
    return Success(lead=lead)


def update_lead(
    *,
    lead_id,
    actor_id: str,
    raw: Mapping[str, Any],
    observed_updated_at,
    client_key: str,
    limiter=None,
):
    lead = _get_lead(lead_id)
    if not lead:
        return NotFound()

    if lead.owner_id != actor_id:
        logger.warning("lead update denied id=%s actor=%s owner=%s", lead.id, actor_id, lead.owner_id)
        return AuthorizationFailed()

    limited = check_rate(client_key=client_key, action="update-lead", limiter=limiter)
    if limited:
        return limited

    observed = parse_observed_stamp(observed_updated_at)
    if observed is None or observed != lead.updated_at:
        logger.info("lead update conflict id=%s observed=%s stored=%s", lead.id, observed_updated_at, lead.updated_at)
        return ConcurrencyConflict(current_updated_at=lead.updated_at)

    result = validate_lead(raw, creating=False)
    if not result.ok:
        return ValidationFailed(errors=result.errors)

    try:
        with transaction.atomic():
            # re-read under lock: another writer may have landed since the check above
            locked = Lead.objects.select_for_update().get(pk=lead.pk)
            if locked.updated_at != observed:
                return ConcurrencyConflict(current_updated_at=locked.updated_at)

            diff = compute_diff(snapshot(locked), result.data)

            for attr, value in result.data.items():
                setattr(locked, attr, value)
            locked.updated_at = timezone.now()
            locked.save()

            if diff:
                record_lead_history(lead=locked, changed_by=actor_id, diff=diff)
    except DatabaseError as exc:
        logger.exception("lead update failed id=%s", lead.id)
        return StorageFailure(error=str(exc))

    logger.info("lead updated id=%s fields=%s", locked.id, sorted(diff))
    return Success(lead=locked, diff=diff)


def delete_lead(*, lead_id, actor_id: str, client_key: str, limiter=None):
    lead = _get_lead(lead_id)
    if not lead:
        return NotFound()

    if lead.owner_id != actor_id:
        logger.warning("lead delete denied id=%s actor=%s owner=%s", lead.id, actor_id, lead.owner_id)
        return AuthorizationFailed()

    limited = check_rate(client_key=client_key, action="delete-lead", limiter=limiter)
    if limited:
        return limited

    lead_pk = lead.pk
    try:
        with transaction.atomic():
            lead.delete()
    except DatabaseError as exc:
        logger.exception("lead delete failed id=%s", lead_pk)
        return StorageFailure(error=str(exc))

    logger.info("lead deleted id=%s", lead_pk)
    return Deleted(lead_id=lead_pk)
