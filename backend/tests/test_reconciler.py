"""Tests for the merge engine using literal candidates."""

from models.schemas.candidate import ExtractionCandidate, SourceMethod
from models.schemas.structured_resume import (
    Bullet,
    Certification,
    Contact,
    Education,
    Experience,
    Project,
    SkillGroup,
    StructuredResume,
)
from services.ids import SequentialIds
from services.reconciler import (
    AI_UNAVAILABLE_WARNING,
    assign_unique_ids,
    is_valid_email,
    is_valid_url,
    merge_contact_field,
    merge_experiences,
    merge_name,
    merge_summary,
    merge_title,
    reconcile,
)


def _heuristic(**fields) -> ExtractionCandidate:
    return ExtractionCandidate(resume=StructuredResume(**fields), confidence=0.6)


def _ai(**fields) -> ExtractionCandidate:
    return ExtractionCandidate(resume=StructuredResume(**fields), source_method=SourceMethod.AI)


def _bullets(prefix: str, count: int) -> list[Bullet]:
    return [Bullet(id=f"{prefix}-{i}", text=f"Did thing {i}") for i in range(count)]


class TestReconcile:
    def test_without_ai_returns_heuristic_unchanged(self):
        heuristic = _heuristic(name="Jane Doe", contact=Contact(email="jane@example.com"))
        outcome = reconcile(heuristic, None)
        assert outcome.resume == heuristic.resume
        assert outcome.improvements == []
        assert outcome.warnings == [AI_UNAVAILABLE_WARNING]

    def test_does_not_mutate_inputs(self):
        heuristic = _heuristic(skills=[SkillGroup(id="s1", category="Technical", items=["Python"])])
        ai = _ai(skills=[SkillGroup(id="s2", category="Technical Skills", items=["Go"])])
        reconcile(heuristic, ai)
        assert heuristic.resume.skills[0].items == ["Python"]
        assert ai.resume.skills[0].items == ["Go"]

    def test_skills_merge_dedup(self):
        heuristic = _heuristic(skills=[SkillGroup(id="s1", category="Technical", items=["Python", "SQL"])])
        ai = _ai(skills=[SkillGroup(id="s2", category="Technical Skills", items=["python", "Go"])])
        outcome = reconcile(heuristic, ai)
        assert [(g.category, g.items) for g in outcome.resume.skills] == [
            ("Technical", ["Python", "SQL", "Go"]),
        ]
        assert outcome.improvements == ["Added skills to Technical"]

    def test_new_skill_category_is_appended(self):
        heuristic = _heuristic(skills=[SkillGroup(id="s1", category="Languages", items=["Python"])])
        ai = _ai(skills=[SkillGroup(id="s2", category="Cloud", items=["AWS"])])
        outcome = reconcile(heuristic, ai)
        assert [g.category for g in outcome.resume.skills] == ["Languages", "Cloud"]
        assert outcome.improvements == ["Added Cloud skills category"]

    def test_appended_entry_reusing_heuristic_id_gets_fresh_id(self):
        heuristic = _heuristic(
            experiences=[Experience(id="h-1", company="Acme Corp", title="Engineer", bullets=_bullets("h", 1))],
            skills=[SkillGroup(id="h-2", category="Languages", items=["Python"])],
        )
        ai = _ai(
            experiences=[Experience(id="h-1", title="Consultant", bullets=[Bullet(id="h-0", text="Advised")])],
            skills=[SkillGroup(id="h-2", category="DevOps", items=["Docker"])],
        )
        outcome = reconcile(heuristic, ai, id_generator=SequentialIds("new"))
        resume = outcome.resume

        assert [e.id for e in resume.experiences] == ["h-1", "new-1"]
        assert resume.experiences[1].bullets[0].id == "new-2"
        assert [g.id for g in resume.skills] == ["h-2", "new-3"]
        assert outcome.improvements == ["Added missing work experience", "Added DevOps skills category"]

    def test_contact_never_overwritten(self):
        heuristic = _heuristic(contact=Contact(email="jane@example.com", phone="555-123-4567"))
        ai = _ai(contact=Contact(
            email="someone@else.com",
            phone="555-000-0000",
            linkedin="https://linkedin.com/in/janedoe",
            github="not a url",
            location="Austin, TX",
        ))
        contact = reconcile(heuristic, ai).resume.contact
        assert contact.email == "jane@example.com"
        assert contact.phone == "555-123-4567"
        assert contact.linkedin == "https://linkedin.com/in/janedoe"
        assert contact.github == ""
        assert contact.location == "Austin, TX"

    def test_scalar_fields(self):
        heuristic = _heuristic(name="Jane", summary="Engineer.")
        ai = _ai(name="Jane Doe", title="Staff Engineer", summary="Backend engineer with 6 years of experience.")
        outcome = reconcile(heuristic, ai)
        assert outcome.resume.name == "Jane Doe"
        assert outcome.resume.title == "Staff Engineer"
        assert outcome.resume.summary == "Backend engineer with 6 years of experience."
        assert outcome.improvements == [
            "Improved name extraction",
            "Added professional title",
            "Enhanced professional summary",
        ]

    def test_empty_ai_changes_nothing(self):
        heuristic = _heuristic(
            name="Jane Doe",
            experiences=[Experience(id="e1", company="Acme", title="Engineer")],
            projects=[Project(id="p1", name="Parser", description="PDF to JSON")],
        )
        outcome = reconcile(heuristic, _ai())
        assert outcome.resume == heuristic.resume
        assert outcome.improvements == []
        assert outcome.warnings == []

    def test_experiences_replaced_when_ai_entries_complete(self):
        heuristic = _heuristic(experiences=[Experience(id="e1", title="Senior Engineer - Acme Corp")])
        ai = _ai(experiences=[
            Experience(id="a1", company="Acme Corp", title="Senior Engineer"),
            Experience(id="a2", company="Initech", title="Engineer"),
        ])
        outcome = reconcile(heuristic, ai)
        assert [e.id for e in outcome.resume.experiences] == ["a1", "a2"]
        assert "Improved work experience parsing" in outcome.improvements

    def test_education_replaced_when_ai_entries_complete(self):
        heuristic = _heuristic(education=[Education(id="d1", institution="State University")])
        ai = _ai(education=[Education(id="d2", institution="State University", degree="B.S.")])
        outcome = reconcile(heuristic, ai)
        assert [e.id for e in outcome.resume.education] == ["d2"]

    def test_education_kept_when_ai_entries_incomplete(self):
        heuristic = _heuristic(education=[Education(id="d1", institution="State University", degree="B.S.")])
        ai = _ai(education=[Education(id="d2", institution="State University")])
        assert reconcile(heuristic, ai).resume.education == heuristic.resume.education

    def test_wholesale_lists(self):
        heuristic = _heuristic(projects=[Project(id="p1", name="Parser")])
        ai = _ai(
            projects=[Project(id="p2", name="Parser", description="Turns PDFs into JSON")],
            certifications=[Certification(id="c1", name="AWS Solutions Architect")],
        )
        outcome = reconcile(heuristic, ai)
        assert [p.id for p in outcome.resume.projects] == ["p2"]
        assert [c.name for c in outcome.resume.certifications] == ["AWS Solutions Architect"]
        assert outcome.improvements == ["Improved projects parsing", "Added certifications"]

    def test_projects_kept_when_ai_entry_lacks_description(self):
        heuristic = _heuristic(projects=[Project(id="p1", name="Parser", description="PDF to JSON")])
        ai = _ai(projects=[Project(id="p2", name="Parser")])
        assert reconcile(heuristic, ai).resume.projects == heuristic.resume.projects


class TestMergeExperiences:
    def test_fuzzy_match_takes_longer_bullet_list(self):
        current = [Experience(id="e1", company="Acme Corp", title="Engineer", bullets=_bullets("h", 1))]
        proposed = [Experience(id="a1", company="Acme Corp.", bullets=_bullets("a", 3))]
        merge = merge_experiences(current, proposed)
        assert merge.changed is True
        assert merge.reason == "Enhanced experience bullets"
        assert len(merge.value) == 1
        assert merge.value[0].id == "e1"
        assert [b.id for b in merge.value[0].bullets] == ["a-0", "a-1", "a-2"]

    def test_fuzzy_match_keeps_richer_heuristic_entry(self):
        current = [Experience(id="e1", company="Acme Corp", bullets=_bullets("h", 3))]
        proposed = [Experience(id="a1", company="Acme Corp", bullets=_bullets("a", 1))]
        merge = merge_experiences(current, proposed)
        assert merge.changed is False
        assert merge.value == current

    def test_unmatched_ai_entry_is_appended(self):
        current = [Experience(id="e1", company="Acme Corp", title="Engineer")]
        proposed = [
            Experience(id="a1", company="Acme Corp", title="Engineer"),
            Experience(id="a2", title="Consultant"),
        ]
        merge = merge_experiences(current, proposed)
        assert [e.id for e in merge.value] == ["e1", "a2"]
        assert merge.reason == "Added missing work experience"

    def test_no_ai_experiences(self):
        current = [Experience(id="e1", company="Acme")]
        assert merge_experiences(current, []).changed is False


class TestFieldRules:
    def test_merge_name(self):
        assert merge_name("", "Jane Doe").value == "Jane Doe"
        assert merge_name("Jane", "Jane Doe").changed is True
        assert merge_name("Jane Doe", "Jane Q. Doe").changed is False
        assert merge_name("", "Jane").changed is False

    def test_merge_title_length_limit(self):
        assert merge_title("", "Engineer").value == "Engineer"
        assert merge_title("", "x" * 100).changed is False
        assert merge_title("Engineer", "Engineer").changed is False

    def test_merge_summary_prefers_longer(self):
        assert merge_summary("Short.", "A longer summary.").changed is True
        assert merge_summary("A longer summary.", "Short.").changed is False

    def test_contact_format_checks(self):
        assert is_valid_email("jane@example.com")
        assert not is_valid_email("jane@example")
        assert not is_valid_email("@example.com")
        assert is_valid_url("https://github.com/janedoe")
        assert not is_valid_url("github.com/janedoe")
        assert merge_contact_field("phone", "", "12345").changed is False
        assert merge_contact_field("phone", "", "+1 555 123 4567").changed is True


def test_contact_non_regression_across_inputs():
    emails = ["jane@example.com", "j.doe@corp.io"]
    proposals = ["", "other@example.com", "garbage"]
    for email in emails:
        for proposed in proposals:
            heuristic = _heuristic(contact=Contact(email=email))
            ai = _ai(contact=Contact(email=proposed))
            assert reconcile(heuristic, ai).resume.contact.email == email


def test_no_data_loss_for_unmatched_complete_entries():
    heuristic = _heuristic(experiences=[Experience(id="e1", company="Acme Corp", title="Engineer")])
    ai = _ai(experiences=[
        Experience(id="a1", company="Acme Corp", title="Engineer"),
        Experience(id="a2", company="Globex", title="Analyst"),
    ])
    merged = reconcile(heuristic, ai).resume.experiences
    assert ("Globex", "Analyst") in {(e.company, e.title) for e in merged}


class TestAssignUniqueIds:
    def test_blank_and_repeated_ids_are_replaced(self):
        resume = StructuredResume(
            experiences=[Experience(id="x", bullets=[Bullet(id="x"), Bullet(id="")])],
            projects=[Project(id="new-1")],
        )
        replaced = assign_unique_ids(resume, SequentialIds("new"))
        ids = [resume.experiences[0].id] + [b.id for b in resume.experiences[0].bullets] + [resume.projects[0].id]
        assert replaced == 3
        assert ids[0] == "x"
        assert len(set(ids)) == 4

    def test_unique_ids_untouched(self):
        resume = StructuredResume(skills=[SkillGroup(id="a"), SkillGroup(id="b")])
        assert assign_unique_ids(resume, SequentialIds()) == 0
        assert [g.id for g in resume.skills] == ["a", "b"]
