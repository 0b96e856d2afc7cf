"""Unit tests for the learner context and the static challenge list."""
import pytest

from learning.challenges import get_challenge, list_challenges
from learning.context import EARN_XP, LearnerContext, Role
from learning.errors import ChallengeNotFoundError


@pytest.mark.unit
class TestLearnerContext:
    def test_every_role_can_earn_xp(self):
        for role in Role:
            assert LearnerContext(role=role).can_earn_xp

    def test_revocation_wins_over_role(self):
        context = LearnerContext(role=Role.ADMIN, revoked_permissions=frozenset({EARN_XP}))
        assert not context.can_earn_xp
        assert context.has_permission("manage_users")

    def test_role_matrix(self):
        assert not LearnerContext(role=Role.ANONYMOUS).has_permission("moderate_content")
        assert LearnerContext(role="moderator").has_permission("manage_users")


@pytest.mark.unit
class TestChallenges:
    def test_three_static_challenges(self):
        challenges = list_challenges()
        assert [c.id for c in challenges] == [1, 2, 3]
        assert [c.difficulty.value for c in challenges] == ["Beginner", "Intermediate", "Advanced"]

    def test_task_xp_adds_up(self):
        for challenge in list_challenges():
            assert challenge.total_task_xp == challenge.xp

    def test_unknown_id(self):
        with pytest.raises(ChallengeNotFoundError, match="Challenge 9 not found"):
            get_challenge(9)
        with pytest.raises(KeyError):
            get_challenge(9)
