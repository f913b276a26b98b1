from datetime import datetime, timedelta, timezone

import pytest

from shared.services.subscription_lifecycle import (
    InvalidInput,
    LifecyclePolicy,
    LifecycleState,
    SubscriptionRecord,
    SubscriptionStatus,
    classify,
    days_past_end,
    due_actions,
)

START = datetime(2025, 1, 1)


def make(end_date, status="active", id=1, start_date=START):
    return SubscriptionRecord(id=id, status=status, start_date=start_date, end_date=end_date)


@pytest.mark.parametrize("status", list(SubscriptionStatus))
def test_no_end_date_is_unlimited_for_any_status(status, now):
    record = make(None, status=status)
    assert classify(record, now) == LifecycleState.UNLIMITED
    assert classify(record, now + timedelta(days=3650)) == LifecycleState.UNLIMITED


def test_end_date_in_future_or_now_is_active(now):
    assert classify(make(now + timedelta(days=10)), now) == LifecycleState.ACTIVE
    assert classify(make(now), now) == LifecycleState.ACTIVE


def test_three_days_past_end_needs_warning(now):
    assert classify(make(now - timedelta(days=3)), now) == LifecycleState.NEEDS_WARNING


def test_six_days_past_end_needs_downgrade(now):
    assert classify(make(now - timedelta(days=6)), now) == LifecycleState.NEEDS_DOWNGRADE


def test_already_expired_is_acknowledged(now):
    record = make(now - timedelta(days=6), status="expired")
    assert classify(record, now) == LifecycleState.EXPIRED_ACKNOWLEDGED


def test_cancelled_past_end_is_acknowledged(now):
    record = make(now - timedelta(hours=1), status="cancelled")
    assert classify(record, now) == LifecycleState.EXPIRED_ACKNOWLEDGED


def test_partial_days_are_floored(now):
    # 1 day 23 hours is still one day
    record = make(now - timedelta(days=1, hours=23, minutes=59))
    assert days_past_end(record, now) == 1
    assert classify(record, now) == LifecycleState.GRACE_PERIOD


def test_threshold_boundaries(now):
    assert classify(make(now - timedelta(milliseconds=1)), now) == LifecycleState.GRACE_PERIOD
    assert classify(make(now - timedelta(days=2)), now) == LifecycleState.NEEDS_WARNING
    assert classify(make(now - timedelta(days=5) + timedelta(milliseconds=1)), now) == LifecycleState.NEEDS_WARNING
    assert classify(make(now - timedelta(days=5)), now) == LifecycleState.NEEDS_DOWNGRADE


def test_pending_past_cutoff_is_never_downgraded(now):
    record = make(now - timedelta(days=30), status="pending")
    assert classify(record, now) == LifecycleState.NEEDS_WARNING


def test_missing_start_date_is_invalid(now):
    record = make(now - timedelta(days=3), start_date=None)
    with pytest.raises(InvalidInput) as exc:
        classify(record, now)
    assert exc.value.subscription_id == 1


def test_end_before_start_is_invalid(now):
    record = make(datetime(2024, 12, 1), start_date=datetime(2025, 1, 1))
    with pytest.raises(InvalidInput):
        classify(record, now)


def test_unlimited_still_requires_start_date(now):
    with pytest.raises(InvalidInput):
        classify(make(None, start_date=None), now)


def test_aware_and_naive_timestamps_compare_as_utc(now):
    aware_now = now.replace(tzinfo=timezone.utc)
    record = make(now - timedelta(days=3))
    assert classify(record, aware_now) == LifecycleState.NEEDS_WARNING

    shifted = (now - timedelta(days=3)).replace(tzinfo=timezone.utc).astimezone(timezone(timedelta(hours=2)))
    assert classify(make(shifted), now) == LifecycleState.NEEDS_WARNING


def test_classify_is_deterministic(now):
    record = make(now - timedelta(days=4))
    assert classify(record, now) == classify(record, now)


def test_custom_policy_moves_thresholds(now):
    policy = LifecyclePolicy(grace_days=1, days_after_warning=1)
    record = make(now - timedelta(days=1))
    assert classify(record, now, policy) == LifecycleState.NEEDS_WARNING
    assert classify(make(now - timedelta(days=2)), now, policy) == LifecycleState.NEEDS_DOWNGRADE


@pytest.mark.parametrize("status", ["active", "pending"])
def test_advancing_now_never_moves_backwards(status):
    order = [
        LifecycleState.ACTIVE,
        LifecycleState.GRACE_PERIOD,
        LifecycleState.NEEDS_WARNING,
        LifecycleState.NEEDS_DOWNGRADE,
    ]
    end = datetime(2026, 1, 10, 8, 30)
    record = make(end, status=status)

    previous = 0
    for hours in range(-48, 24 * 10, 7):
        state = classify(record, end + timedelta(hours=hours))
        position = order.index(state)
        assert position >= previous
        previous = position


def test_model_validate_reads_orm_rows(subscription_row, now):
    row = subscription_row(end_date=now - timedelta(days=3))
    record = SubscriptionRecord.model_validate(row)
    assert record.status == SubscriptionStatus.ACTIVE
    assert classify(record, now) == LifecycleState.NEEDS_WARNING


def test_due_actions_partitions_in_input_order(now):
    records = [
        make(now - timedelta(days=6), id="a"),
        make(now - timedelta(days=3), id="b"),
        make(now + timedelta(days=3), id="c"),
        make(now - timedelta(days=9), id="d"),
        make(now - timedelta(days=2), id="e"),
        make(now - timedelta(days=9), id="f", status="expired"),
        make(None, id="g"),
    ]

    actions = due_actions(records, now)

    assert [r.id for r in actions.to_warn] == ["b", "e"]
    assert [r.id for r in actions.to_downgrade] == ["a", "d"]
    assert not actions.skipped


def test_due_actions_lists_are_disjoint(now):
    records = [make(now - timedelta(hours=h), id=h) for h in range(0, 24 * 8, 5)]
    actions = due_actions(records, now)

    warn_ids = {r.id for r in actions.to_warn}
    downgrade_ids = {r.id for r in actions.to_downgrade}
    assert warn_ids
    assert downgrade_ids
    assert not warn_ids & downgrade_ids


def test_due_actions_skips_invalid_records_and_continues(now):
    records = [
        make(now - timedelta(days=3), id=1, start_date=None),
        make(now - timedelta(days=6), id=2),
        make(datetime(2020, 1, 1), id=3, start_date=datetime(2021, 1, 1)),
    ]

    actions = due_actions(records, now)

    assert [r.id for r in actions.to_downgrade] == [2]
    assert [s.record.id for s in actions.skipped] == [1, 3]
    assert actions.skipped[0].reason == "start_date is missing"
    assert actions.skipped[1].reason == "end_date is before start_date"


def test_due_actions_accepts_generators(now):
    actions = due_actions((make(now - timedelta(days=3), id=i) for i in range(3)), now)
    assert len(actions.to_warn) == 3
