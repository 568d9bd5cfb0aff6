"""
Assessment Service

The logical operations exposed to the HTTP layer. Every write follows the
same order: resolve entities, check permission, plan the workflow
transition, validate the payload, then persist. A failure at any step leaves
stored state untouched.

Read-then-write sequences on a form (first-answer transition, submit,
return, approve) run under that form's repository lock, so two concurrent
writers cannot both act on the same observed state.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional, Sequence, Union
from uuid import uuid4

from .canon import canonical_json, content_hash
from .config import Settings
from .content import parse_content, serialize_tree
from .engine import (
    BulkOutcome,
    BulkResult,
    EffectivenessScorer,
    Progress,
    ReportAssembler,
    apply_transition,
    calculate_progress,
    plan_answer_transition,
    plan_transition,
)
from .exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PldAuditError,
    ValidationFailedError,
)
from .models import (
    Answer,
    Attachment,
    DocumentModel,
    EffectivenessPolicy,
    Form,
    FormArchive,
    FormMetadata,
    Question,
    ReportOptions,
    ReportType,
    Response,
    Role,
    Section,
    TestExecution,
    User,
    WorkflowAction,
    WorkflowStatus,
)
from .repository import Repository
from .validation import (
    AnswerPayload,
    AttachmentPayload,
    QuestionPayload,
    QuestionUpdate,
    ReviewAnswerPayload,
    SectionPayload,
    SectionUpdate,
    validate_payload,
)

logger = logging.getLogger(__name__)

Payload = Union[dict[str, Any], Any]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssessmentService:
    """
    Workflow, builder and reporting operations over a Repository.

    Usage:
        service = AssessmentService(InMemoryRepository(), load_default_policy())
        form = service.create_form(admin.id, "PLD 2025")
        service.assign_form(form.id, admin.id, "filler@example.com")
    """

    def __init__(
        self,
        repository: Repository,
        policy: EffectivenessPolicy,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.settings = settings or Settings()
        self.clock = clock
        self.scorer = EffectivenessScorer(policy=policy)
        self.assembler = ReportAssembler(scorer=self.scorer)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _require_user(self, user_id: str) -> User:
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError(message="Usuário não encontrado", entity_id=user_id)
        return user

    def _require_form(self, form_id: str) -> Form:
        form = self.repository.get_form(form_id)
        if form is None:
            raise NotFoundError(message="Formulário não encontrado", entity_id=form_id)
        return form

    def _require_section(self, section_id: str) -> Section:
        section = self.repository.get_section(section_id)
        if section is None:
            raise NotFoundError(message="Seção não encontrada", entity_id=section_id)
        return section

    def _require_question(self, question_id: str) -> tuple[Question, Section, Form]:
        question = self.repository.get_question(question_id)
        if question is None:
            raise NotFoundError(message="Pergunta não encontrada", entity_id=question_id)
        section = self._require_section(question.section_id)
        return question, section, self._require_form(section.form_id)

    def _require_reviewer(self, user: User, entity_id: Optional[str] = None) -> None:
        if not user.is_privileged:
            raise ForbiddenError(
                message="Ação restrita a revisores",
                details={"actor_id": user.id, "role": user.role.value},
                entity_id=entity_id,
            )

    def _require_creator(self, form: Form, user: User) -> None:
        if form.created_by_id != user.id:
            raise ForbiddenError(
                message="Somente o criador do formulário pode realizar esta ação",
                details={"actor_id": user.id, "created_by_id": form.created_by_id},
                entity_id=form.id,
            )

    def _require_assignee(self, form: Form, user: User) -> None:
        if not form.is_assigned_to(user.id):
            raise ForbiddenError(
                message="Formulário não atribuído a este usuário",
                details={"actor_id": user.id, "assigned_to_id": form.assigned_to_id},
                entity_id=form.id,
            )

    def _transition(
        self,
        form_id: str,
        action: WorkflowAction,
        check: Optional[Callable[[Form], None]] = None,
    ) -> Form:
        """
        Plan and apply a transition under the form's lock.

        check runs against the freshly loaded form before planning.
        """
        with self.repository.lock(form_id):
            form = self._require_form(form_id)
            if check is not None:
                check(form)
            plan = plan_transition(form.id, form.status, action)
            apply_transition(form, plan, self.clock())
            saved = self.repository.save_form(form)
        logger.info(
            "Form %s: %s %s -> %s",
            form_id, action.value, plan.from_state.value, plan.to_state.value,
            extra={"form_id": form_id, "status": plan.to_state.value},
        )
        return saved

    # =========================================================================
    # Users
    # =========================================================================

    def register_user(self, email: str, name: str = "", role: Role = Role.USER) -> User:
        """Add an actor to the directory. Emails are unique (case-insensitive)."""
        if not (email or "").strip() or "@" not in email:
            raise ValidationFailedError(
                message="Email inválido",
                details={"errors": [{"field": "email", "message": "Email inválido"}]},
            )
        if self.repository.find_user_by_email(email) is not None:
            raise ValidationFailedError(
                message="Email já cadastrado",
                details={"errors": [{"field": "email", "message": "Email já cadastrado"}]},
            )
        return self.repository.add_user(User.create(email=email, name=name, role=role))

    # =========================================================================
    # Forms
    # =========================================================================

    def create_form(
        self,
        actor_id: str,
        name: str,
        metadata: Optional[FormMetadata] = None,
    ) -> Form:
        actor = self._require_user(actor_id)
        self._require_reviewer(actor)
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError(
                message="Nome do formulário é obrigatório",
                details={"errors": [{"field": "name", "message": "Obrigatório"}]},
            )
        form = self.repository.add_form(Form.create(name=name, created_by_id=actor.id, metadata=metadata))
        logger.info("Form %s created by %s", form.id, actor.id, extra={"form_id": form.id})
        return form

    def get_form(self, form_id: str) -> Form:
        return self._require_form(form_id)

    def list_forms(self, actor_id: str) -> list[Form]:
        """Forms a reviewer created, or forms assigned to a filler."""
        actor = self._require_user(actor_id)
        if actor.is_privileged:
            return self.repository.list_forms(created_by_id=actor.id)
        return self.repository.list_forms(assigned_to_id=actor.id)

    def update_form_metadata(self, form_id: str, actor_id: str, metadata: FormMetadata) -> Form:
        actor = self._require_user(actor_id)
        with self.repository.lock(form_id):
            form = self._require_form(form_id)
            self._require_creator(form, actor)
            form.metadata = metadata
            form.updated_at = self.clock()
            return self.repository.save_form(form)

    def delete_form(self, form_id: str, actor_id: str) -> None:
        """Delete a form and its whole tree."""
        actor = self._require_user(actor_id)
        form = self._require_form(form_id)
        self._require_creator(form, actor)
        self.repository.delete_form(form_id)
        logger.info("Form %s deleted by %s", form_id, actor.id, extra={"form_id": form_id})

    # =========================================================================
    # Workflow
    # =========================================================================

    def _resolve_target(self, target: str) -> User:
        user = self.repository.get_user(target) or self.repository.find_user_by_email(target)
        if user is None:
            raise NotFoundError(
                message="Usuário destinatário não encontrado",
                details={"target": target},
            )
        return user

    def assign_form(self, form_id: str, actor_id: str, target: str) -> Form:
        """
        Assign a form to a filler (by id or email) and start a new cycle.

        Raises:
            NotFoundError: Form or target filler missing
            ForbiddenError: Actor did not create the form
        """
        actor = self._require_user(actor_id)
        form = self._require_form(form_id)
        filler = self._resolve_target(target)
        self._require_creator(form, actor)

        with self.repository.lock(form_id):
            form = self._require_form(form_id)
            plan = plan_transition(form.id, form.status, WorkflowAction.ASSIGN)
            form.assigned_to_id = filler.id
            form.assigned_email = filler.email
            apply_transition(form, plan, self.clock())
            saved = self.repository.save_form(form)
        logger.info(
            "Form %s assigned to %s",
            form_id, filler.id,
            extra={"form_id": form_id, "status": saved.status.value},
        )
        return saved

    def _bulk(
        self,
        action: WorkflowAction,
        forms: Sequence[Form],
        operation: Callable[[Form], Form],
    ) -> BulkResult:
        result = BulkResult(action=action)
        for form in forms:
            try:
                updated = operation(form)
            except (InvalidStateError, ForbiddenError, NotFoundError) as e:
                logger.warning(
                    "Bulk %s skipped form %s: %s",
                    action.value, form.id, e.code,
                    extra={"form_id": form.id, "status": form.status.value},
                )
                result.outcomes.append(BulkOutcome.skipped(form.id, form.status, e))
            else:
                result.outcomes.append(BulkOutcome.success(form.id, form.status, updated.status))
        return result

    def assign_all(self, actor_id: str, target: str) -> BulkResult:
        """Assign every form the actor created to one filler."""
        actor = self._require_user(actor_id)
        self._require_reviewer(actor)
        filler = self._resolve_target(target)
        forms = self.repository.list_forms(created_by_id=actor.id)
        return self._bulk(
            WorkflowAction.ASSIGN,
            forms,
            lambda f: self.assign_form(f.id, actor.id, filler.id),
        )

    def record_answer(self, question_id: str, filler_id: str, payload: Payload) -> Answer:
        """
        Record (or update) the filler's answer to a question.

        The first answer while ASSIGNED or RETURNED moves the form to
        IN_PROGRESS, atomically with the answer write.

        Raises:
            NotFoundError: Question or filler missing
            ForbiddenError: Form not assigned to the filler
            InvalidStateError: Form not open for answers
            ValidationFailedError: Payload rejected
        """
        filler = self._require_user(filler_id)
        question, _, form = self._require_question(question_id)
        self._require_assignee(form, filler)

        with self.repository.lock(form.id):
            form = self._require_form(form.id)
            self._require_assignee(form, filler)
            plan = plan_answer_transition(form.id, form.status)
            data = validate_payload(AnswerPayload, payload, self.settings, entity_id=question_id)

            answer = self.repository.get_answer(question.id, filler.id) or Answer.create(question.id, filler.id)
            self._fill_answer(answer, data)
            saved = self.repository.save_answer(answer)

            if plan.changes_state:
                apply_transition(form, plan, self.clock())
                self.repository.save_form(form)
                logger.info(
                    "Form %s: first answer %s -> %s",
                    form.id, plan.from_state.value, plan.to_state.value,
                    extra={"form_id": form.id, "status": plan.to_state.value},
                )
        return saved

    def _fill_answer(self, answer: Answer, data: AnswerPayload) -> None:
        answer.response = data.response
        answer.response_text = data.response_text
        answer.criticality = data.criticality
        answer.deficiency_text = data.deficiency_text if data.response is Response.NAO else ""
        answer.recommendation_text = data.recommendation_text if data.response is Response.NAO else ""
        answer.test = TestExecution(
            status=data.test_status,
            description=data.test_description,
            requisition_ref=data.requisition_ref,
            response_ref=data.test_response_ref,
            sample_ref=data.sample_ref,
            evidence_ref=data.evidence_ref,
        )
        answer.corrective_action_plan = data.corrective_action_plan
        answer.updated_at = self.clock()

    def review_answer(self, question_id: str, reviewer_id: str, payload: Payload) -> Answer:
        """
        Reviewer edit of the assignee's answer.

        A "Não" response requires both deficiency and recommendation.
        """
        reviewer = self._require_user(reviewer_id)
        question, _, form = self._require_question(question_id)
        self._require_reviewer(reviewer, form.id)
        self._require_creator(form, reviewer)
        if not form.assigned_to_id:
            raise InvalidStateError.for_action(
                entity_id=form.id,
                action="REVIEW_ANSWER",
                current_state=form.status.value,
                required_states=[s.value for s in WorkflowStatus if s is not WorkflowStatus.DRAFT],
            )
        data = validate_payload(ReviewAnswerPayload, payload, self.settings, entity_id=question_id)
        with self.repository.lock(form.id):
            answer = (
                self.repository.get_answer(question.id, form.assigned_to_id)
                or Answer.create(question.id, form.assigned_to_id)
            )
            self._fill_answer(answer, data)
            return self.repository.save_answer(answer)

    def submit(self, form_id: str, filler_id: str) -> Form:
        """
        Send the form for review.

        Raises:
            ForbiddenError: Filler is not the assignee
            InvalidStateError: Form not IN_PROGRESS or RETURNED
        """
        filler = self._require_user(filler_id)
        self._require_assignee(self._require_form(form_id), filler)
        return self._transition(
            form_id,
            WorkflowAction.SUBMIT,
            check=lambda form: self._require_assignee(form, filler),
        )

    def submit_all(self, filler_id: str) -> BulkResult:
        """Submit every form assigned to the filler; ineligible ones are reported as skipped."""
        filler = self._require_user(filler_id)
        forms = self.repository.list_forms(assigned_to_id=filler.id)
        return self._bulk(
            WorkflowAction.SUBMIT,
            forms,
            lambda f: self.submit(f.id, filler.id),
        )

    def return_form(self, form_id: str, reviewer_id: str) -> Form:
        """Send a submitted form back to the filler for adjustments."""
        reviewer = self._require_user(reviewer_id)
        self._require_reviewer(reviewer, form_id)
        self._require_form(form_id)
        return self._transition(form_id, WorkflowAction.RETURN)

    def return_all(self, reviewer_id: str, assignee_id: str) -> BulkResult:
        """Return every form of the reviewer assigned to one filler."""
        reviewer = self._require_user(reviewer_id)
        self._require_reviewer(reviewer)
        self._require_user(assignee_id)
        forms = [
            f for f in self.repository.list_forms(created_by_id=reviewer.id)
            if f.assigned_to_id == assignee_id
        ]
        return self._bulk(
            WorkflowAction.RETURN,
            forms,
            lambda f: self.return_form(f.id, reviewer.id),
        )

    def approve(self, form_id: str, reviewer_id: str) -> Form:
        """Approve a submitted form, completing the cycle."""
        reviewer = self._require_user(reviewer_id)
        self._require_reviewer(reviewer, form_id)
        self._require_form(form_id)
        return self._transition(form_id, WorkflowAction.APPROVE)

    def toggle_applicable(self, question_id: str, actor_id: str, value: bool) -> Question:
        """
        Mark a question applicable or not.

        Reviewers may always toggle; the assignee only while the form is
        ASSIGNED, IN_PROGRESS or RETURNED.
        """
        actor = self._require_user(actor_id)
        question, _, form = self._require_question(question_id)
        with self.repository.lock(form.id):
            if not actor.is_privileged:
                form = self._require_form(form.id)
                self._require_assignee(form, actor)
                plan_transition(form.id, form.status, WorkflowAction.TOGGLE_APPLICABLE)
            question = self.repository.get_question(question_id) or question
            question.is_applicable = bool(value)
            question.updated_at = self.clock()
            return self.repository.save_question(question)

    # =========================================================================
    # Builder
    # =========================================================================

    def _builder_form(self, form_id: str, actor_id: str) -> tuple[Form, User]:
        actor = self._require_user(actor_id)
        form = self._require_form(form_id)
        self._require_reviewer(actor, form_id)
        self._require_creator(form, actor)
        return form, actor

    def list_sections(self, form_id: str) -> list[Section]:
        """Sections of a form in order."""
        return self.repository.list_sections(self._require_form(form_id).id)

    def create_section(self, form_id: str, actor_id: str, payload: Payload) -> Section:
        form, actor = self._builder_form(form_id, actor_id)
        data = validate_payload(SectionPayload, payload, self.settings)
        return self.repository.add_section(Section.create(
            form_id=form.id,
            item=data.item,
            custom_label=data.custom_label,
            has_norm=data.has_norm,
            norm_reference=data.norm_reference if data.has_norm else "",
            description=data.description,
            created_by_id=actor.id,
        ))

    def update_section(self, section_id: str, actor_id: str, payload: Payload) -> Section:
        section = self._require_section(section_id)
        self._builder_form(section.form_id, actor_id)
        data = validate_payload(SectionUpdate, payload, self.settings, entity_id=section_id)
        changes = {
            name: getattr(data, name)
            for name in data.model_fields_set
            if getattr(data, name) is not None
        }
        updated = replace(section, **changes)
        if not updated.has_norm:
            updated.norm_reference = ""
        return self.repository.save_section(updated)

    def delete_section(self, section_id: str, actor_id: str) -> None:
        """Delete a section with its questions and attachments; survivors are renumbered."""
        section = self._require_section(section_id)
        self._builder_form(section.form_id, actor_id)
        self.repository.delete_section(section_id)

    def list_questions(self, section_id: str) -> list[Question]:
        """Questions of a section in order."""
        return self.repository.list_questions(self._require_section(section_id).id)

    def create_question(self, section_id: str, actor_id: str, payload: Payload) -> Question:
        section = self._require_section(section_id)
        self._builder_form(section.form_id, actor_id)
        data = validate_payload(QuestionPayload, payload, self.settings)
        question = Question.create(section_id=section.id, text=data.text)
        question.description = data.description
        return self.repository.add_question(question)

    def update_question(self, question_id: str, actor_id: str, payload: Payload) -> Question:
        """Apply a partial builder update; a response other than "Não" clears deficiency fields."""
        question, section, _ = self._require_question(question_id)
        self._builder_form(section.form_id, actor_id)
        data = validate_payload(QuestionUpdate, payload, self.settings, entity_id=question_id)
        sent = data.model_fields_set

        for name in ("text", "description", "template_ref", "capitulation", "response_text"):
            if name in sent:
                setattr(question, name, getattr(data, name) or "")
        if "is_applicable" in sent and data.is_applicable is not None:
            question.is_applicable = data.is_applicable
        if "criticality" in sent:
            question.criticality = data.criticality

        test_fields = {
            "test_status": "status",
            "test_description": "description",
            "requisition_ref": "requisition_ref",
            "test_response_ref": "response_ref",
            "sample_ref": "sample_ref",
            "evidence_ref": "evidence_ref",
        }
        for name, attr in test_fields.items():
            if name in sent:
                setattr(question.test, attr, getattr(data, name))

        action_fields = {
            "action_origin": "origin",
            "action_owner": "owner",
            "action_description": "description",
            "action_reported_on": "reported_on",
            "action_original_deadline": "original_deadline",
            "action_current_deadline": "current_deadline",
            "action_comments": "comments",
        }
        for name, attr in action_fields.items():
            if name in sent:
                value = getattr(data, name)
                if value is None and isinstance(getattr(question.corrective_action, attr), str):
                    value = ""
                setattr(question.corrective_action, attr, value)

        if sent & {"response", "deficiency_text", "recommendation_text"}:
            question.set_response(
                data.response if "response" in sent else question.response,
                data.deficiency_text if "deficiency_text" in sent else question.deficiency_text,
                data.recommendation_text if "recommendation_text" in sent else question.recommendation_text,
            )
        question.updated_at = self.clock()
        return self.repository.save_question(question)

    def delete_question(self, question_id: str, actor_id: str) -> None:
        _, section, _ = self._require_question(question_id)
        self._builder_form(section.form_id, actor_id)
        self.repository.delete_question(question_id)

    def reorder(
        self,
        parent_id: str,
        ordered_child_ids: Sequence[str],
        actor_id: Optional[str] = None,
    ) -> None:
        """
        Reorder the sections of a form or the questions of a section.

        The whole collection is renumbered in one locked batch; ids not
        listed keep their relative order after the listed ones.

        Raises:
            NotFoundError: Unknown parent or child id
        """
        form = self.repository.get_form(parent_id)
        if form is not None:
            if actor_id is not None:
                self._builder_form(form.id, actor_id)
            self.repository.set_section_order(form.id, list(ordered_child_ids))
            return
        section = self.repository.get_section(parent_id)
        if section is not None:
            if actor_id is not None:
                self._builder_form(section.form_id, actor_id)
            self.repository.set_question_order(section.id, list(ordered_child_ids))
            return
        raise NotFoundError(message="Coleção não encontrada", entity_id=parent_id)

    # =========================================================================
    # Attachments
    # =========================================================================

    def add_attachment(
        self,
        actor_id: str,
        payload: Payload,
        section_id: Optional[str] = None,
        question_id: Optional[str] = None,
    ) -> Attachment:
        """
        Attach a file to a section (NORMA) or a question (other categories).

        Replaces any previous attachment of the same owner and category.
        The form's creator may always attach; the assignee only while the
        form is open for answers.
        """
        if bool(section_id) == bool(question_id):
            raise ValidationFailedError(
                message="Informe exatamente um entre seção e pergunta",
                details={"section_id": section_id, "question_id": question_id},
            )
        actor = self._require_user(actor_id)
        if question_id:
            _, section, form = self._require_question(question_id)
        else:
            section = self._require_section(section_id)
            form = self._require_form(section.form_id)

        data = validate_payload(AttachmentPayload, payload, self.settings)
        if data.category.is_section_level != bool(section_id):
            raise ValidationFailedError(
                message=f"Categoria {data.category.value} não pode ser anexada a este item",
                details={"category": data.category.value},
            )

        if form.created_by_id != actor.id:
            self._require_assignee(form, actor)
            plan_transition(form.id, form.status, WorkflowAction.RECORD_ANSWER)

        attachment = Attachment(
            id=str(uuid4()),
            category=data.category,
            original_name=data.original_name,
            filename=data.filename,
            path=data.path,
            mime_type=data.mime_type,
            size=data.size,
            section_id=section_id,
            question_id=question_id,
            reference_text=data.reference_text or None,
        )
        saved = self.repository.replace_attachment(attachment)
        if section_id and data.reference_text:
            section = self._require_section(section_id)
            section.has_norm = True
            section.norm_reference = data.reference_text
            self.repository.save_section(section)
        return saved

    def delete_attachment(self, attachment_id: str, actor_id: str) -> None:
        attachment = self.repository.get_attachment(attachment_id)
        if attachment is None:
            raise NotFoundError(message="Anexo não encontrado", entity_id=attachment_id)
        if attachment.question_id:
            _, section, _ = self._require_question(attachment.question_id)
        else:
            section = self._require_section(attachment.section_id)
        self._builder_form(section.form_id, actor_id)
        self.repository.delete_attachment(attachment_id)

    # =========================================================================
    # Conclusion, Progress, Reports
    # =========================================================================

    def resolve_tree(self, form: Form) -> Optional[list[Section]]:
        """
        The tree a report is built from.

        Live sections with the assignee's answers overlaid, or the archived
        snapshot of a concluded form. None when the form has neither.
        """
        tree = self.repository.load_tree(form.id, answers_of=form.assigned_to_id)
        if tree:
            return tree
        if form.archive is not None:
            return parse_content(form.archive.content, form.id)
        return None

    def conclude_form(self, form_id: str, actor_id: str) -> Form:
        """
        Archive the resolved tree and clear the live builder tree.

        The archive holds canonical JSON and its SHA-256, so it can be
        verified later.
        """
        _, actor = self._builder_form(form_id, actor_id)
        with self.repository.lock(form_id):
            form = self._require_form(form_id)
            tree = self.repository.load_tree(form.id, answers_of=form.assigned_to_id)
            if not tree:
                raise InvalidStateError(
                    message="Formulário sem conteúdo para concluir",
                    details={"current_state": form.status.value},
                    entity_id=form.id,
                )
            payload = serialize_tree(tree)
            form.archive = FormArchive(
                content=canonical_json(payload),
                content_hash=content_hash(payload),
                concluded_at=self.clock(),
                concluded_by_id=actor.id,
            )
            form.updated_at = self.clock()
            saved = self.repository.save_form(form)
            self.repository.clear_sections(form.id)
        logger.info(
            "Form %s concluded (%s)",
            form_id, saved.archive.content_hash[:12],
            extra={"form_id": form_id, "status": saved.status.value},
        )
        return saved

    def calculate_progress(self, form_id: str) -> Progress:
        form = self._require_form(form_id)
        return calculate_progress(self.resolve_tree(form) or [])

    def assemble_report(
        self,
        form_id: str,
        actor_id: str,
        report_type: ReportType = ReportType.PARTIAL,
        section_ids: Optional[Sequence[str]] = None,
        include_recommendations: Optional[bool] = None,
        show_effectiveness: Optional[bool] = None,
        as_of: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> DocumentModel:
        """
        Assemble the report document for a form.

        Only the form's creator and its assignee may request it. Toggles
        default to the form's stored metadata.

        Raises:
            ForbiddenError: Actor unrelated to the form
            NotFoundError: Unknown section id in section_ids
            InvalidContentError: Form content missing or malformed
            IncompleteAssessmentError: FULL requested before completion
        """
        actor = self._require_user(actor_id)
        form = self._require_form(form_id)
        if form.created_by_id != actor.id and not form.is_assigned_to(actor.id):
            raise ForbiddenError(
                message="Sem acesso ao relatório deste formulário",
                details={"actor_id": actor.id},
                entity_id=form.id,
            )

        sections = self.resolve_tree(form)
        if section_ids is not None and sections is not None:
            known = {s.id for s in sections}
            unknown = [i for i in section_ids if i not in known]
            if unknown:
                raise NotFoundError(
                    message="Seção não encontrada",
                    details={"unknown_ids": unknown},
                    entity_id=form.id,
                )

        metadata = form.metadata
        options = ReportOptions(
            report_type=report_type,
            section_ids=list(section_ids) if section_ids is not None else None,
            privileged=actor.is_privileged,
            include_recommendations=(
                metadata.include_recommendations
                if include_recommendations is None else include_recommendations
            ),
            show_effectiveness=(
                metadata.show_effectiveness if show_effectiveness is None else show_effectiveness
            ),
            institutions=list(metadata.institutions),
            evaluator_qualification=metadata.evaluator_qualification,
            as_of=as_of,
            base_url=self.settings.public_base_url,
            generated_at=generated_at or self.clock(),
        )
        return self.assembler.assemble(form.id, form.name, sections, options)


__all__ = ["AssessmentService", "PldAuditError"]
