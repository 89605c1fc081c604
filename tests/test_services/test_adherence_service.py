"""
Tests for Adherence Service
Tests adherence summary computation and per-user statistics
"""

import pytest
from datetime import date, datetime
from types import SimpleNamespace

from errors import NotAuthenticatedError
from models import DoseLog, Medication, TimingStatus
from services.adherence_service import AdherenceService, AdherenceSummary, compute_adherence_summary


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def adherence_service():
    """Create adherence service instance"""
    return AdherenceService()


def _meds(count):
    return [SimpleNamespace(id=i) for i in range(count)]


def _logs(*statuses):
    return [SimpleNamespace(status=s) for s in statuses]


# =============================================================================
# Test Summary Computation
# =============================================================================

class TestComputeAdherenceSummary:
    """Tests for the pure summary fold"""

    @pytest.mark.unit
    def test_no_medications(self):
        assert compute_adherence_summary([], []) == AdherenceSummary()

    @pytest.mark.unit
    def test_no_logs(self):
        summary = compute_adherence_summary(_meds(3), [])

        assert summary.total == 3
        assert summary.taken == 0
        assert summary.missed == 3
        assert summary.adherence_rate == 0

    @pytest.mark.unit
    def test_mixed_statuses(self):
        summary = compute_adherence_summary(
            _meds(4),
            _logs(TimingStatus.ON_TIME, TimingStatus.LATE, TimingStatus.EARLY)
        )

        assert (summary.on_time, summary.late, summary.early) == (1, 1, 1)
        assert summary.taken == 3
        assert summary.missed == 1
        assert summary.adherence_rate == 75

    @pytest.mark.unit
    @pytest.mark.parametrize("total,taken,rate", [
        (3, 1, 33),
        (3, 2, 67),
        (8, 1, 13),  # 12.5 rounds up
        (1, 1, 100),
    ])
    def test_rate_rounding(self, total, taken, rate):
        summary = compute_adherence_summary(_meds(total), _logs(*[TimingStatus.ON_TIME] * taken))
        assert summary.adherence_rate == rate

    @pytest.mark.unit
    def test_more_logs_than_medications(self):
        summary = compute_adherence_summary(_meds(2), _logs(*[TimingStatus.LATE] * 5))

        assert summary.taken == 5
        assert summary.missed == 0
        assert summary.adherence_rate == 100

    @pytest.mark.unit
    def test_accepts_dict_logs_and_raw_values(self):
        summary = compute_adherence_summary(_meds(2), [{"status": "early"}, {"status": "on_time"}])

        assert summary.early == 1
        assert summary.on_time == 1

    @pytest.mark.unit
    def test_unknown_status_ignored(self):
        summary = compute_adherence_summary(_meds(1), [{"status": "skipped"}, {}])
        assert summary.taken == 0

    @pytest.mark.unit
    def test_to_dict_keys(self):
        assert set(AdherenceSummary().to_dict()) == {
            "total", "taken", "on_time", "late", "early", "missed", "adherence_rate"
        }


# =============================================================================
# Test Per-User Statistics
# =============================================================================

class TestGetAdherenceStats:
    """Tests for the signed-in user's statistics"""

    @pytest.mark.asyncio
    async def test_requires_sign_in(self, adherence_service, anonymous_identity, db_session):
        with pytest.raises(NotAuthenticatedError):
            await adherence_service.get_adherence_stats(anonymous_identity, db=db_session)

    @pytest.mark.asyncio
    async def test_counts_only_own_records(
        self, adherence_service, identity, db_session, test_dose_log, other_user
    ):
        other_med = Medication(user_id=other_user.id, name="Aspirin", time="09:00")
        db_session.add(other_med)
        db_session.commit()
        db_session.add(DoseLog(
            medication_id=other_med.id,
            user_id=other_user.id,
            taken_at=datetime(2024, 3, 1, 9, 0),
            scheduled_time="09:00",
            status=TimingStatus.ON_TIME,
            minutes_difference=0
        ))
        db_session.commit()

        summary = await adherence_service.get_adherence_stats(identity, db=db_session)

        assert summary.total == 3
        assert summary.taken == 1
        assert summary.late == 1
        assert summary.adherence_rate == 33

    @pytest.mark.asyncio
    async def test_day_filter(self, adherence_service, identity, db_session, test_dose_log):
        same_day = await adherence_service.get_adherence_stats(identity, day=date(2024, 3, 1), db=db_session)
        other_day = await adherence_service.get_adherence_stats(identity, day=date(2024, 3, 2), db=db_session)

        assert same_day.taken == 1
        assert other_day.taken == 0
        assert other_day.missed == 3
