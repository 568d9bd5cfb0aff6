"""
Tests for the in-memory repository.

Tests cover:
- Dense ordering after add, delete and reorder
- Cascading deletes
- Attachment replacement per owner and category
- Answer upsert and tree overlay
- Concurrent reorder
"""
import threading

import pytest

from pldaudit.exceptions import NotFoundError
from pldaudit.models import Answer, AttachmentCategory, Form, Question, Response, Section
from pldaudit.repository import InMemoryRepository, renumber

from tests.conftest import make_attachment


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def form(repo):
    return repo.add_form(Form.create("Avaliação", created_by_id="admin-1"))


def add_sections(repo, form, count):
    return [repo.add_section(Section.create(form.id, f"Item {i}")) for i in range(count)]


def add_questions(repo, section, count):
    return [repo.add_question(Question.create(section.id, f"Pergunta {i}")) for i in range(count)]


class TestRenumber:

    def test_listed_first_then_rest_in_order(self):
        assert renumber(["a", "b", "c", "d"], ["c", "a"], "p") == ["c", "a", "b", "d"]

    def test_duplicates_ignored(self):
        assert renumber(["a", "b"], ["b", "b"], "p") == ["b", "a"]

    def test_unknown_id_rejected(self):
        with pytest.raises(NotFoundError) as exc_info:
            renumber(["a"], ["a", "z"], "parent-1")
        assert exc_info.value.details["unknown_ids"] == ["z"]


class TestOrdering:

    def test_add_assigns_dense_order(self, repo, form):
        sections = add_sections(repo, form, 3)
        assert [s.order for s in sections] == [0, 1, 2]

    def test_delete_renumbers_survivors(self, repo, form):
        first, second, third = add_sections(repo, form, 3)
        repo.delete_section(second.id)
        assert [(s.id, s.order) for s in repo.list_sections(form.id)] == [
            (first.id, 0), (third.id, 1),
        ]

    def test_delete_question_renumbers(self, repo, form):
        [section] = add_sections(repo, form, 1)
        questions = add_questions(repo, section, 3)
        repo.delete_question(questions[0].id)
        assert [q.order for q in repo.list_questions(section.id)] == [0, 1]

    def test_reorder_sections(self, repo, form):
        a, b, c = add_sections(repo, form, 3)
        repo.set_section_order(form.id, [c.id, a.id, b.id])
        assert [s.id for s in repo.list_sections(form.id)] == [c.id, a.id, b.id]

    def test_reorder_unknown_id_changes_nothing(self, repo, form):
        a, b = add_sections(repo, form, 2)
        with pytest.raises(NotFoundError):
            repo.set_section_order(form.id, [b.id, "ghost"])
        assert [s.id for s in repo.list_sections(form.id)] == [a.id, b.id]

    def test_concurrent_reorders_stay_dense(self, repo, form):
        [section] = add_sections(repo, form, 1)
        ids = [q.id for q in add_questions(repo, section, 20)]
        orders = [list(reversed(ids)), ids[5:] + ids[:5], ids[10:] + ids[:10]]

        threads = [
            threading.Thread(target=repo.set_question_order, args=(section.id, order))
            for order in orders * 5
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        final = repo.list_questions(section.id)
        assert sorted(q.order for q in final) == list(range(20))
        assert [q.id for q in final] in orders


class TestCascade:

    def test_delete_section_removes_questions_and_attachments(self, repo, form):
        [section] = add_sections(repo, form, 1)
        [question] = add_questions(repo, section, 1)
        repo.replace_attachment(make_attachment(question_id=question.id))
        repo.replace_attachment(make_attachment(AttachmentCategory.NORMA, section_id=section.id))

        repo.delete_section(section.id)

        assert repo.get_question(question.id) is None
        assert repo.list_attachments() == []

    def test_delete_form_removes_tree(self, repo, form):
        [section] = add_sections(repo, form, 1)
        add_questions(repo, section, 2)
        repo.delete_form(form.id)
        assert repo.get_form(form.id) is None
        assert repo.list_sections(form.id) == []
        assert repo.questions == {}

    def test_delete_section_releases_its_lock(self, repo, form):
        [section, kept] = add_sections(repo, form, 2)
        with repo.lock(section.id):
            add_questions(repo, section, 1)
        repo.lock(kept.id)

        repo.delete_section(section.id)

        assert section.id not in repo._parent_locks
        assert kept.id in repo._parent_locks

    def test_delete_form_releases_tree_locks(self, repo, form):
        [section] = add_sections(repo, form, 1)
        repo.lock(section.id)
        repo.lock(form.id)

        repo.delete_form(form.id)

        assert repo._parent_locks == {}

    def test_delete_missing_section(self, repo):
        with pytest.raises(NotFoundError):
            repo.delete_section("ghost")


class TestAttachments:

    def test_same_owner_and_category_replaced(self, repo, form):
        [section] = add_sections(repo, form, 1)
        [question] = add_questions(repo, section, 1)
        repo.replace_attachment(make_attachment(question_id=question.id, original_name="v1.pdf"))
        latest = repo.replace_attachment(make_attachment(question_id=question.id, original_name="v2.pdf"))
        repo.replace_attachment(make_attachment(
            AttachmentCategory.TEST_AMOSTRA, question_id=question.id, original_name="amostra.xlsx",
        ))

        names = sorted(a.original_name for a in repo.list_attachments(question_id=question.id))
        assert names == ["amostra.xlsx", "v2.pdf"]
        assert repo.get_attachment(latest.id) is not None


class TestAnswers:

    def test_upsert_keeps_id(self, repo, form):
        [section] = add_sections(repo, form, 1)
        [question] = add_questions(repo, section, 1)
        first = repo.save_answer(Answer.create(question.id, "filler-1"))

        again = Answer.create(question.id, "filler-1")
        again.response = Response.SIM
        saved = repo.save_answer(again)

        assert saved.id == first.id
        assert repo.get_answer(question.id, "filler-1").response is Response.SIM

    def test_answer_for_unknown_question(self, repo):
        with pytest.raises(NotFoundError):
            repo.save_answer(Answer.create("ghost", "filler-1"))

    def test_tree_overlays_answers_of_one_user(self, repo, form):
        [section] = add_sections(repo, form, 1)
        [question] = add_questions(repo, section, 1)
        answer = Answer.create(question.id, "filler-1")
        answer.response = Response.NAO
        answer.deficiency_text = "falha"
        repo.save_answer(answer)

        [resolved] = repo.load_tree(form.id, answers_of="filler-1")
        assert resolved.questions[0].response is Response.NAO
        assert resolved.questions[0].deficiency_text == "falha"

        [bare] = repo.load_tree(form.id, answers_of="someone-else")
        assert bare.questions[0].response is Response.EMPTY

    def test_reads_are_copies(self, repo, form):
        loaded = repo.get_form(form.id)
        loaded.name = "Alterado"
        assert repo.get_form(form.id).name == "Avaliação"
