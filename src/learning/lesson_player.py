"""
Lesson player: a single Previous/Next pager over a lesson's sections, plus the
auto-chain decision taken when the last section is completed.
"""

from dataclasses import dataclass
from typing import Optional, Union

from learning.content import Lesson, Module, Quiz, Section


@dataclass(frozen=True)
class NextLesson:
    lesson: Lesson


@dataclass(frozen=True)
class TakeQuiz:
    quiz: Quiz


@dataclass(frozen=True)
class ReturnToModule:
    pass


AutoChain = Union[NextLesson, TakeQuiz, ReturnToModule]


class LessonPlayer:
    """
    Cursor over ``lesson.sections``.

    Invariant: ``0 <= section_index < len(sections)``. A lesson without sections
    pins the cursor at 0 and counts as being on its last section.
    """

    def __init__(self, lesson: Lesson):
        self.lesson = lesson
        self.section_index = 0

    @property
    def section_count(self) -> int:
        return len(self.lesson.sections)

    @property
    def current_section(self) -> Optional[Section]:
        if not self.lesson.sections:
            return None
        return self.lesson.sections[self.section_index]

    @property
    def is_first(self) -> bool:
        return self.section_index == 0

    @property
    def is_last(self) -> bool:
        return self.section_index >= self.section_count - 1

    @property
    def can_go_previous(self) -> bool:
        return self.section_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.section_index < self.section_count - 1

    @property
    def progress(self) -> float:
        if not self.section_count:
            return 100.0
        return (self.section_index + 1) / self.section_count * 100

    def previous(self) -> bool:
        if not self.can_go_previous:
            return False
        self.section_index -= 1
        return True

    def next(self) -> bool:
        if not self.can_go_next:
            return False
        self.section_index += 1
        return True

    def restart(self) -> None:
        self.section_index = 0

    def auto_chain(self, module: Module) -> AutoChain:
        """What completing this lesson leads to: next lesson, first quiz, or back to the module."""
        next_lesson = module.lesson_after(self.lesson.id)
        if next_lesson is not None:
            return NextLesson(next_lesson)
        if module.first_quiz is not None:
            return TakeQuiz(module.first_quiz)
        return ReturnToModule()

    def forward_label(self, module: Module) -> str:
        if not self.is_last:
            return "Next"
        step = self.auto_chain(module)
        if isinstance(step, NextLesson):
            return "Complete & Next Lesson"
        if isinstance(step, TakeQuiz):
            return "Complete & Take Quiz"
        return "Complete Lesson"
