"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides an in-memory content source, sample
modules and a ready-made screen router.
"""
import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from learning.content import Module, Quiz  # noqa: E402
from learning.context import LearnerContext, Role  # noqa: E402
from learning.errors import ContentFetchError  # noqa: E402
from learning.router import ScreenRouter  # noqa: E402


class FakeContentSource:
    """
    In-memory ContentSource.

    ``fail`` holds keys like ("module", 1) or ("quiz", 101) that should raise.
    ``hold(key)`` returns an event; the next fetch for that key waits on it.
    """

    def __init__(self, modules=(), quizzes=()):
        self.modules = {m.id: m for m in modules}
        self.quizzes = {q.id: q for q in quizzes}
        self.fail = set()
        self.calls = []
        self._gates = {}

    def hold(self, key) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[key] = gate
        return gate

    async def _fetch(self, key):
        self.calls.append(key)
        gate = self._gates.pop(key, None)
        if gate is not None:
            await gate.wait()
        if key in self.fail:
            raise ContentFetchError(" ".join(str(part) for part in key if part is not None) + " unavailable")

    async def list_modules(self):
        await self._fetch(("catalog", None))
        return [m.model_copy(update={"lessons": [], "quizzes": []}) for m in self.modules.values()]

    async def get_module(self, module_id):
        await self._fetch(("module", module_id))
        return self.modules[module_id]

    async def get_module_quizzes(self, module_id):
        await self._fetch(("quizzes", module_id))
        return [
            q.model_copy(update={"questions": [], "question_count": len(q.questions)})
            for q in self.quizzes.values()
            if q.module_id == module_id
        ]

    async def get_quiz(self, quiz_id):
        await self._fetch(("quiz", quiz_id))
        return self.quizzes[quiz_id]


def make_questions(correct_indices, start_id=1):
    return [
        {
            "id": start_id + i,
            "question_text": f"Question {i + 1}?",
            "options": ["A", "B", "C", "D"],
            "correct_answer_index": correct,
            "explanation": f"Because {correct}.",
        }
        for i, correct in enumerate(correct_indices)
    ]


@pytest.fixture
def two_lesson_module() -> Module:
    """Module 1: lessons [L1 (two sections), L2] and one quiz Q1."""
    return Module.model_validate({
        "id": 1,
        "title": "Checks and Balances",
        "description": "How the branches limit each other",
        "category": "Government",
        "difficulty": "Beginner",
        "xp_reward": 100,
        "lessons": [
            {
                "id": 11,
                "title": "The three branches",
                "lesson_type": "text",
                "sections": [
                    {"type": "text", "title": "Intro", "content": "Legislative, executive, judicial."},
                    {"type": "video", "title": "Watch", "content": "Overview", "video_url": "https://v.example/1"},
                ],
            },
            {"id": 12, "title": "Vetoes", "lesson_type": "text", "content": "The president may veto."},
        ],
    })


@pytest.fixture
def no_quiz_module() -> Module:
    """Module 2: one lesson, no quizzes."""
    return Module.model_validate({
        "id": 2,
        "title": "History of Lawmaking",
        "description": "From bill to law",
        "category": "History",
        "difficulty": "Intermediate",
        "lessons": [{"id": 21, "title": "Early legislatures", "content": "Long ago..."}],
    })


@pytest.fixture
def scenario_module() -> Module:
    """Module 3: one lesson, one quiz with two questions."""
    return Module.model_validate({
        "id": 3,
        "title": "Voting Rights",
        "description": "Who may vote and why",
        "category": "Rights",
        "difficulty": "Advanced",
        "lessons": [{"id": 31, "title": "Suffrage", "content": "The right to vote."}],
    })


@pytest.fixture
def q1() -> Quiz:
    return Quiz.model_validate({
        "id": 101,
        "module_id": 1,
        "title": "Branches Quiz",
        "description": "Check your understanding",
        "time_limit": 10,
        "passing_score": 70,
        "xp_reward": 50,
        "questions": make_questions([1, 0, 2], start_id=1001),
    })


@pytest.fixture
def scenario_quiz() -> Quiz:
    return Quiz.model_validate({
        "id": 301,
        "module_id": 3,
        "title": "Suffrage Quiz",
        "passing_score": 70,
        "xp_reward": 40,
        "questions": make_questions([0, 1], start_id=3001),
    })


@pytest.fixture
def content_source(two_lesson_module, no_quiz_module, scenario_module, q1, scenario_quiz) -> FakeContentSource:
    return FakeContentSource(
        modules=[two_lesson_module, no_quiz_module, scenario_module],
        quizzes=[q1, scenario_quiz],
    )


@pytest.fixture
def learner() -> LearnerContext:
    return LearnerContext(user_id="u-1", nickname="Wanjiku", role=Role.ANONYMOUS)


@pytest.fixture
def award_xp() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def catalog_modules(content_source):
    return [m.model_copy(update={"lessons": [], "quizzes": []}) for m in content_source.modules.values()]


@pytest.fixture
def router(content_source, learner, award_xp, catalog_modules) -> ScreenRouter:
    return ScreenRouter(content_source, learner, award_xp, modules=catalog_modules)
