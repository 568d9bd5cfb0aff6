"""
Persistence boundary.

The service talks to storage only through the Repository protocol. Records
go in and come out as typed dataclasses; the in-memory implementation hands
out deep copies so nothing is mutated behind the store's back.

Ordering invariant: sections under a form and questions under a section keep
a dense 0-based ``order``. Every operation that changes membership or order
rewrites the whole collection's order in one batch while holding that
parent's lock.
"""
from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol, Sequence

from .exceptions import NotFoundError
from .models import Answer, Attachment, Form, Question, Section, User


class Repository(Protocol):
    """Storage operations the assessment core depends on."""

    def lock(self, key: str) -> threading.RLock: ...

    # Users
    def add_user(self, user: User) -> User: ...
    def get_user(self, user_id: str) -> Optional[User]: ...
    def find_user_by_email(self, email: str) -> Optional[User]: ...

    # Forms
    def add_form(self, form: Form) -> Form: ...
    def get_form(self, form_id: str) -> Optional[Form]: ...
    def save_form(self, form: Form) -> Form: ...
    def delete_form(self, form_id: str) -> None: ...
    def list_forms(
        self,
        created_by_id: Optional[str] = None,
        assigned_to_id: Optional[str] = None,
    ) -> list[Form]: ...

    # Sections
    def add_section(self, section: Section) -> Section: ...
    def get_section(self, section_id: str) -> Optional[Section]: ...
    def save_section(self, section: Section) -> Section: ...
    def delete_section(self, section_id: str) -> None: ...
    def list_sections(self, form_id: str) -> list[Section]: ...
    def set_section_order(self, form_id: str, ordered_ids: Sequence[str]) -> list[Section]: ...
    def clear_sections(self, form_id: str) -> None: ...

    # Questions
    def add_question(self, question: Question) -> Question: ...
    def get_question(self, question_id: str) -> Optional[Question]: ...
    def save_question(self, question: Question) -> Question: ...
    def delete_question(self, question_id: str) -> None: ...
    def list_questions(self, section_id: str) -> list[Question]: ...
    def set_question_order(self, section_id: str, ordered_ids: Sequence[str]) -> list[Question]: ...

    # Attachments
    def replace_attachment(self, attachment: Attachment) -> Attachment: ...
    def get_attachment(self, attachment_id: str) -> Optional[Attachment]: ...
    def delete_attachment(self, attachment_id: str) -> None: ...
    def list_attachments(
        self,
        section_id: Optional[str] = None,
        question_id: Optional[str] = None,
    ) -> list[Attachment]: ...

    # Answers
    def get_answer(self, question_id: str, user_id: str) -> Optional[Answer]: ...
    def save_answer(self, answer: Answer) -> Answer: ...

    # Trees
    def load_tree(self, form_id: str, answers_of: Optional[str] = None) -> list[Section]: ...


def renumber(ids_in_order: Sequence[str], ordered_ids: Sequence[str], parent_id: str) -> list[str]:
    """
    Final order of a collection after a reorder request.

    Requested ids come first, in the order given (duplicates ignored); ids
    not mentioned keep their relative order after them.

    Raises:
        NotFoundError: If a requested id is not in the collection
    """
    known = set(ids_in_order)
    unknown = [i for i in ordered_ids if i not in known]
    if unknown:
        raise NotFoundError(
            message=f"Unknown child ids for '{parent_id}': {', '.join(unknown)}",
            details={"parent_id": parent_id, "unknown_ids": unknown},
            entity_id=parent_id,
        )
    seen: set[str] = set()
    result: list[str] = []
    for child_id in list(ordered_ids) + list(ids_in_order):
        if child_id not in seen:
            seen.add(child_id)
            result.append(child_id)
    return result


class InMemoryRepository:
    """
    Thread-safe in-memory Repository.

    ``self._lock`` guards the record dicts; ``lock(key)`` hands out one
    re-entrant lock per parent (form or section) for check-and-set sequences.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._parent_locks: dict[str, threading.RLock] = {}
        self.users: dict[str, User] = {}
        self.forms: dict[str, Form] = {}
        self.sections: dict[str, Section] = {}
        self.questions: dict[str, Question] = {}
        self.attachments: dict[str, Attachment] = {}
        self.answers: dict[tuple[str, str], Answer] = {}

    def lock(self, key: str) -> threading.RLock:
        with self._lock:
            if key not in self._parent_locks:
                self._parent_locks[key] = threading.RLock()
            return self._parent_locks[key]

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        with self.lock(key), self._lock:
            yield

    # =========================================================================
    # Users
    # =========================================================================

    def add_user(self, user: User) -> User:
        with self._lock:
            self.users[user.id] = copy.deepcopy(user)
            return copy.deepcopy(user)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self.users.get(user_id)
            return copy.deepcopy(user) if user else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        needle = (email or "").strip().lower()
        with self._lock:
            for user in self.users.values():
                if user.email.lower() == needle:
                    return copy.deepcopy(user)
        return None

    # =========================================================================
    # Forms
    # =========================================================================

    def add_form(self, form: Form) -> Form:
        with self._lock:
            self.forms[form.id] = copy.deepcopy(form)
            return copy.deepcopy(form)

    def get_form(self, form_id: str) -> Optional[Form]:
        with self._lock:
            form = self.forms.get(form_id)
            return copy.deepcopy(form) if form else None

    def save_form(self, form: Form) -> Form:
        with self._lock:
            if form.id not in self.forms:
                raise NotFoundError(message="Form not found", entity_id=form.id)
            self.forms[form.id] = copy.deepcopy(form)
            return copy.deepcopy(form)

    def delete_form(self, form_id: str) -> None:
        with self._locked(form_id):
            self.clear_sections(form_id)
            self.forms.pop(form_id, None)
            self._parent_locks.pop(form_id, None)

    def list_forms(
        self,
        created_by_id: Optional[str] = None,
        assigned_to_id: Optional[str] = None,
    ) -> list[Form]:
        with self._lock:
            forms = [
                f for f in self.forms.values()
                if (created_by_id is None or f.created_by_id == created_by_id)
                and (assigned_to_id is None or f.assigned_to_id == assigned_to_id)
            ]
            return [copy.deepcopy(f) for f in sorted(forms, key=lambda f: (f.created_at, f.id))]

    # =========================================================================
    # Sections
    # =========================================================================

    def _sections_of(self, form_id: str) -> list[Section]:
        return sorted(
            (s for s in self.sections.values() if s.form_id == form_id),
            key=lambda s: (s.order, s.created_at),
        )

    def add_section(self, section: Section) -> Section:
        with self._locked(section.form_id):
            stored = copy.deepcopy(section)
            stored.questions = []
            stored.attachments = []
            stored.order = len(self._sections_of(section.form_id))
            self.sections[stored.id] = stored
            return copy.deepcopy(stored)

    def get_section(self, section_id: str) -> Optional[Section]:
        with self._lock:
            section = self.sections.get(section_id)
            return copy.deepcopy(section) if section else None

    def save_section(self, section: Section) -> Section:
        with self._lock:
            current = self.sections.get(section.id)
            if current is None:
                raise NotFoundError(message="Section not found", entity_id=section.id)
            stored = copy.deepcopy(section)
            stored.order = current.order
            stored.questions = []
            stored.attachments = []
            self.sections[stored.id] = stored
            return copy.deepcopy(stored)

    def delete_section(self, section_id: str) -> None:
        with self._lock:
            section = self.sections.get(section_id)
            if section is None:
                raise NotFoundError(message="Section not found", entity_id=section_id)
            form_id = section.form_id
        with self._locked(form_id):
            self._drop_section(section_id)
            for index, survivor in enumerate(self._sections_of(form_id)):
                survivor.order = index

    def _drop_section(self, section_id: str) -> None:
        for question in [q for q in self.questions.values() if q.section_id == section_id]:
            self._drop_question(question.id)
        for att in [a for a in self.attachments.values() if a.section_id == section_id]:
            del self.attachments[att.id]
        self.sections.pop(section_id, None)
        self._parent_locks.pop(section_id, None)

    def list_sections(self, form_id: str) -> list[Section]:
        with self._lock:
            return [copy.deepcopy(s) for s in self._sections_of(form_id)]

    def set_section_order(self, form_id: str, ordered_ids: Sequence[str]) -> list[Section]:
        with self._locked(form_id):
            current = [s.id for s in self._sections_of(form_id)]
            final = renumber(current, ordered_ids, form_id)
            for index, section_id in enumerate(final):
                self.sections[section_id].order = index
            return [copy.deepcopy(s) for s in self._sections_of(form_id)]

    def clear_sections(self, form_id: str) -> None:
        with self._locked(form_id):
            for section in self._sections_of(form_id):
                self._drop_section(section.id)

    # =========================================================================
    # Questions
    # =========================================================================

    def _questions_of(self, section_id: str) -> list[Question]:
        return sorted(
            (q for q in self.questions.values() if q.section_id == section_id),
            key=lambda q: (q.order, q.created_at),
        )

    def add_question(self, question: Question) -> Question:
        with self._locked(question.section_id):
            if question.section_id not in self.sections:
                raise NotFoundError(message="Section not found", entity_id=question.section_id)
            stored = copy.deepcopy(question)
            stored.attachments = []
            stored.order = len(self._questions_of(question.section_id))
            self.questions[stored.id] = stored
            return copy.deepcopy(stored)

    def get_question(self, question_id: str) -> Optional[Question]:
        with self._lock:
            question = self.questions.get(question_id)
            return copy.deepcopy(question) if question else None

    def save_question(self, question: Question) -> Question:
        with self._lock:
            current = self.questions.get(question.id)
            if current is None:
                raise NotFoundError(message="Question not found", entity_id=question.id)
            stored = copy.deepcopy(question)
            stored.order = current.order
            stored.section_id = current.section_id
            stored.attachments = []
            self.questions[stored.id] = stored
            return copy.deepcopy(stored)

    def delete_question(self, question_id: str) -> None:
        with self._lock:
            question = self.questions.get(question_id)
            if question is None:
                raise NotFoundError(message="Question not found", entity_id=question_id)
            section_id = question.section_id
        with self._locked(section_id):
            self._drop_question(question_id)
            for index, survivor in enumerate(self._questions_of(section_id)):
                survivor.order = index

    def _drop_question(self, question_id: str) -> None:
        for att in [a for a in self.attachments.values() if a.question_id == question_id]:
            del self.attachments[att.id]
        for key in [k for k in self.answers if k[0] == question_id]:
            del self.answers[key]
        self.questions.pop(question_id, None)

    def list_questions(self, section_id: str) -> list[Question]:
        with self._lock:
            return [copy.deepcopy(q) for q in self._questions_of(section_id)]

    def set_question_order(self, section_id: str, ordered_ids: Sequence[str]) -> list[Question]:
        with self._locked(section_id):
            current = [q.id for q in self._questions_of(section_id)]
            final = renumber(current, ordered_ids, section_id)
            for index, question_id in enumerate(final):
                self.questions[question_id].order = index
            return [copy.deepcopy(q) for q in self._questions_of(section_id)]

    # =========================================================================
    # Attachments
    # =========================================================================

    def replace_attachment(self, attachment: Attachment) -> Attachment:
        """Delete any attachment with the same owner and category, then create."""
        with self._locked(attachment.owner_id):
            for existing in list(self.attachments.values()):
                if (
                    existing.category is attachment.category
                    and existing.section_id == attachment.section_id
                    and existing.question_id == attachment.question_id
                ):
                    del self.attachments[existing.id]
            self.attachments[attachment.id] = copy.deepcopy(attachment)
            return copy.deepcopy(attachment)

    def get_attachment(self, attachment_id: str) -> Optional[Attachment]:
        with self._lock:
            att = self.attachments.get(attachment_id)
            return copy.deepcopy(att) if att else None

    def delete_attachment(self, attachment_id: str) -> None:
        with self._lock:
            if self.attachments.pop(attachment_id, None) is None:
                raise NotFoundError(message="Attachment not found", entity_id=attachment_id)

    def list_attachments(
        self,
        section_id: Optional[str] = None,
        question_id: Optional[str] = None,
    ) -> list[Attachment]:
        with self._lock:
            found = [
                a for a in self.attachments.values()
                if (section_id is None or a.section_id == section_id)
                and (question_id is None or a.question_id == question_id)
            ]
            return [copy.deepcopy(a) for a in sorted(found, key=lambda a: (a.created_at, a.id))]

    # =========================================================================
    # Answers
    # =========================================================================

    def get_answer(self, question_id: str, user_id: str) -> Optional[Answer]:
        with self._lock:
            answer = self.answers.get((question_id, user_id))
            return copy.deepcopy(answer) if answer else None

    def save_answer(self, answer: Answer) -> Answer:
        """Upsert on (question_id, user_id); the first answer's id is kept."""
        with self._lock:
            if answer.question_id not in self.questions:
                raise NotFoundError(message="Question not found", entity_id=answer.question_id)
            stored = copy.deepcopy(answer)
            existing = self.answers.get(answer.key)
            if existing is not None:
                stored.id = existing.id
                stored.created_at = existing.created_at
            self.answers[answer.key] = stored
            return copy.deepcopy(stored)

    # =========================================================================
    # Trees
    # =========================================================================

    def load_tree(self, form_id: str, answers_of: Optional[str] = None) -> list[Section]:
        """
        Sections of a form with questions and attachments populated.

        When answers_of is given, that user's answers are overlaid on the
        questions.
        """
        with self._lock:
            tree: list[Section] = []
            for section in self._sections_of(form_id):
                node = copy.deepcopy(section)
                node.attachments = self.list_attachments(section_id=section.id)
                node.questions = []
                for question in self._questions_of(section.id):
                    q = copy.deepcopy(question)
                    q.attachments = self.list_attachments(question_id=question.id)
                    if answers_of is not None:
                        q = q.with_answer(self.answers.get((question.id, answers_of)))
                    node.questions.append(q)
                tree.append(node)
            return tree
