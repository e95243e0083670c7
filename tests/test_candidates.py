"""Tests for candidate resolution per phase."""

from core.candidates import resolve_candidates
from core.phases import Phase
from core.selection import NominationGroup
from tests.conftest import fake_award, fake_user

USERS = [
    fake_user(1, user_group="staff"),
    fake_user(2, user_group="staff"),
    fake_user(3, user_group="guest"),
    fake_user(4, user_group="staff"),
    fake_user(5, user_group="staff"),
]


class TestNominationPhase:
    def test_eligible_users_in_directory_order(self):
        award = fake_award(nomination_criteria={"groups": ["staff"]})
        candidates = resolve_candidates(award, Phase.NOMINATION, USERS)
        assert [c.user.id for c in candidates] == [1, 2, 4, 5]
        assert not any(c.is_duo for c in candidates)

    def test_no_criteria(self):
        award = fake_award()
        assert len(resolve_candidates(award, Phase.NOMINATION, USERS)) == len(USERS)


class TestFinalVotingPhase:
    def test_top_nominees_ranked_and_truncated(self):
        award = fake_award(phase=Phase.FINAL_VOTING, finalist_count=2)
        candidates = resolve_candidates(award, Phase.FINAL_VOTING, USERS, nominee_ids=[3, 2, 3, 4, 2, 5, 4, 4])
        assert [c.user.id for c in candidates] == [4, 2]

    def test_ties_keep_directory_order(self):
        award = fake_award(phase=Phase.FINAL_VOTING, finalist_count=3)
        candidates = resolve_candidates(award, Phase.FINAL_VOTING, USERS, nominee_ids=[5, 3, 1])
        assert [c.user.id for c in candidates] == [1, 3, 5]

    def test_no_nominations(self):
        award = fake_award(phase=Phase.FINAL_VOTING)
        assert resolve_candidates(award, Phase.FINAL_VOTING, USERS) == []

    def test_duo_pairs(self):
        award = fake_award(phase=Phase.FINAL_VOTING, nomination_criteria={"is_duo": True}, finalist_count=1)
        groups = [
            NominationGroup("g1", (3, 4)),
            NominationGroup("g2", (1, 2)),
            NominationGroup("g3", (2, 1)),
        ]
        candidates = resolve_candidates(award, Phase.FINAL_VOTING, USERS, groups=groups)
        assert len(candidates) == 1
        assert candidates[0].is_duo
        assert candidates[0].group_id == "g2"
        assert [m.id for m in candidates[0].members] == [1, 2]


class TestLaterPhases:
    def test_results_and_closed_are_empty(self):
        award = fake_award(phase=Phase.RESULTS)
        assert resolve_candidates(award, Phase.RESULTS, USERS, nominee_ids=[1, 2]) == []
        assert resolve_candidates(award, "CLOSED", USERS, nominee_ids=[1, 2]) == []
