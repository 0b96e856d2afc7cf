"""
Static civic challenges shown on the Challenges screen.
"""

from typing import List

from pydantic import BaseModel, ConfigDict

from learning.content import Difficulty
from learning.errors import ChallengeNotFoundError


class ChallengeTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    xp: int


class Challenge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    difficulty: Difficulty
    xp: int
    duration: str
    icon: str
    tasks: List[ChallengeTask]

    @property
    def total_task_xp(self) -> int:
        return sum(task.xp for task in self.tasks)


CHALLENGES: List[Challenge] = [
    Challenge(
        id=1,
        title="Democracy Basics Challenge",
        description="Master the fundamentals of American democracy",
        difficulty=Difficulty.BEGINNER,
        xp=500,
        duration="7 days",
        icon="🎯",
        tasks=[
            ChallengeTask(id=1, title='Complete "Checks & Balances" module', xp=100),
            ChallengeTask(id=2, title="Watch all video lessons on the Constitution", xp=150),
            ChallengeTask(id=3, title="Score 80%+ on Bill of Rights quiz", xp=150),
            ChallengeTask(id=4, title="Share one interesting fact you learned", xp=100),
        ],
    ),
    Challenge(
        id=2,
        title="Election Expert",
        description="Become an authority on how elections work",
        difficulty=Difficulty.INTERMEDIATE,
        xp=750,
        duration="10 days",
        icon="🗳️",
        tasks=[
            ChallengeTask(id=1, title="Complete Electoral College module", xp=150),
            ChallengeTask(id=2, title="Complete How Laws Are Made module", xp=130),
            ChallengeTask(id=3, title="Take the Voting Rights quiz", xp=120),
            ChallengeTask(id=4, title="Watch 5 election-related videos", xp=200),
            ChallengeTask(id=5, title="Explore all interactive election maps", xp=150),
        ],
    ),
    Challenge(
        id=3,
        title="Policy Pro",
        description="Understand how policy is made and influenced",
        difficulty=Difficulty.ADVANCED,
        xp=1000,
        duration="14 days",
        icon="💼",
        tasks=[
            ChallengeTask(id=1, title="Complete Lobbying & Interest Groups module", xp=180),
            ChallengeTask(id=2, title="Complete How Laws Are Made module", xp=130),
            ChallengeTask(id=3, title="Analyze 3 real-world policy cases", xp=300),
            ChallengeTask(id=4, title="Score 90%+ on all policy quizzes", xp=240),
            ChallengeTask(id=5, title="Complete the Policy Simulation", xp=150),
        ],
    ),
]


def list_challenges() -> List[Challenge]:
    return list(CHALLENGES)


def get_challenge(challenge_id: int) -> Challenge:
    for challenge in CHALLENGES:
        if challenge.id == challenge_id:
            return challenge
    raise ChallengeNotFoundError(challenge_id)
