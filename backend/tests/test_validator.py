from models.schemas.result import Err, Ok
from models.schemas.structured_resume import (
    Bullet,
    DateInfo,
    Education,
    Experience,
    SkillGroup,
    StructuredResume,
)
from services.errors import SchemaValidationError
from services.validator import validate


def test_valid_resume_is_ok():
    resume = StructuredResume(
        name="Jane Doe",
        experiences=[Experience(
            id="e1",
            start_date=DateInfo(year="2020", month="Jan"),
            current=True,
            bullets=[Bullet(id="b1", text="Shipped X")],
        )],
        skills=[SkillGroup(id="s1", category="Languages", items=["Python"])],
    )
    result = validate(resume)
    assert isinstance(result, Ok)
    assert result.value == resume


def test_empty_resume_is_ok():
    assert isinstance(validate(StructuredResume()), Ok)


def test_duplicate_ids_across_lists():
    resume = StructuredResume(
        experiences=[Experience(id="x", bullets=[Bullet(id="b1")])],
        skills=[SkillGroup(id="b1", category="Cloud")],
    )
    result = validate(resume)
    assert isinstance(result, Err)
    assert isinstance(result.error, SchemaValidationError)
    assert result.error.errors == [
        "skills.0.id: Duplicate identifier 'b1' (first used at experiences.0.bullets.0)",
    ]


def test_empty_id():
    result = validate(StructuredResume(education=[Education(id=" ")]))
    assert isinstance(result, Err)
    assert result.error.errors == ["education.0.id: Identifier must be a non-empty string"]


def test_date_without_year():
    result = validate(StructuredResume(education=[Education(id="d1", end_date=DateInfo(month="May"))]))
    assert isinstance(result, Err)
    assert result.error.errors == ["education.0.endDate.year: Date must have a year"]


def test_current_role_with_end_date():
    job = Experience(id="e1", current=True, end_date=DateInfo(year="2024"))
    result = validate(StructuredResume(experiences=[job]))
    assert isinstance(result, Err)
    assert result.error.errors == ["experiences.0.endDate: Current role must not have an end date"]


def test_wrong_types_report_field_paths():
    resume = StructuredResume.model_construct(name=42)
    result = validate(resume)
    assert isinstance(result, Err)
    assert result.error.errors[0].startswith("name: ")
