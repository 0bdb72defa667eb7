"""Post-parse review: flags results a human should look at before use."""

from models.responses import ParseReview, ReconciliationResult

MANUAL_REVIEW_THRESHOLD = 0.7


def review_result(result: ReconciliationResult) -> ParseReview:
    resume = result.resume
    critical = []
    suggestions = []

    if len(resume.name.strip()) < 2:
        critical.append("Name is missing or incomplete")
    if not resume.contact.email and not resume.contact.phone:
        critical.append("No contact information found")
    if not resume.experiences and not resume.education:
        critical.append("No work experience or education found")

    if result.confidence < MANUAL_REVIEW_THRESHOLD:
        suggestions.append("Consider manually reviewing and correcting parsed information")
    if not resume.summary:
        suggestions.append("Add a professional summary")
    if not resume.skills:
        suggestions.append("Add skills section")
    if result.warnings:
        suggestions.append("Review parsing warnings for potential issues")

    return ParseReview(is_valid=not critical, critical_issues=critical, suggestions=suggestions)
