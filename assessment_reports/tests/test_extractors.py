from __future__ import annotations

from assessment_reports.report_parser import defaults
from assessment_reports.report_parser.extractors import (
    extract_case_info,
    extract_challenges,
    extract_documents,
    extract_overview,
    extract_strategies,
    extract_strengths,
)
from assessment_reports.report_parser.models import ActionItem, ActionKind, Section, Strategy
from assessment_reports.report_parser.normalize import default_school_year, today_label


def test_case_info_from_labels() -> None:
    text = (
        "**Student Name:** Sarah Johnson\n"
        "**Grade:** 5th Grade\n"
        "**School Year:** 2024-2025\n"
        "**Analysis Date:** 03/14/2025\n"
        "**Author:** Ms. Rivera\n"
    )
    info = extract_case_info(text)
    assert info.student_name == "Sarah Johnson"
    assert info.grade == "5th Grade"
    assert info.school_year == "2024-2025"
    assert info.date_created == "03/14/2025"
    assert info.last_updated == "03/14/2025"
    assert info.tutor == "Ms. Rivera"


def test_case_info_from_context() -> None:
    info = extract_case_info("Liam is a thoughtful fourth grader.\nHe is in grade 4 this year.")
    assert info.student_name == "Liam"
    assert info.grade == "Grade 4"


def test_ordinal_grade_is_normalised() -> None:
    assert extract_case_info("She is in 5th grade.").grade == "5th Grade"


def test_pronoun_is_not_a_name() -> None:
    info = extract_case_info("This is a report about progress.\nMaya works hard every day.")
    assert info.student_name == "Maya"


def test_unsafe_values_are_rejected() -> None:
    info = extract_case_info("Student Name: <script>\nName: Ana Ruiz")
    assert info.student_name == "Ana Ruiz"


def test_overrides_win_when_not_blank() -> None:
    text = "Student Name: Sarah\nAuthor: Mr. Stone"
    info = extract_case_info(text, student_name="Jane Doe", report_author="Dr. Kim")
    assert info.student_name == "Jane Doe"
    assert info.tutor == "Dr. Kim"
    assert extract_case_info(text, student_name="  ").student_name == "Sarah"


def test_case_info_defaults() -> None:
    info = extract_case_info("nothing here")
    assert info.student_name == defaults.DEFAULT_STUDENT_NAME
    assert info.grade == defaults.DEFAULT_GRADE
    assert info.tutor == defaults.DEFAULT_AUTHOR
    assert info.date_created == today_label()
    assert info.school_year == default_school_year()


def test_documents_from_supplied_names() -> None:
    documents = extract_documents([], ["eval.pdf", " ", "notes.docx"])
    assert [document.title for document in documents] == ["eval.pdf", "notes.docx"]
    assert all(document.author == defaults.DOCUMENT_AUTHOR for document in documents)


def test_documents_from_section_bullets() -> None:
    sections = [Section("Documents Reviewed", "- Psych Eval\n- Teacher Notes\nNot a bullet")]
    assert [document.title for document in extract_documents(sections)] == [
        "Psych Eval",
        "Teacher Notes",
    ]


def test_documents_default() -> None:
    documents = extract_documents([Section("Overview", "text")])
    assert [document.title for document in documents] == [defaults.DEFAULT_DOCUMENT_TITLE]


def test_overview_themes_from_sentences() -> None:
    content = (
        "Sarah is a curious learner who reads above grade level and enjoys science.\n\n"
        "She has difficulty with writing. She has many friends."
    )
    overview = extract_overview([Section("Student Overview", content)])
    assert overview.at_a_glance.startswith("Sarah is a curious learner")
    assert [theme.title for theme in overview.sections] == [theme.title for theme in defaults.THEMES]
    assert overview.sections[0].content == "She has difficulty with writing."
    assert overview.sections[1].content == "She has difficulty with writing."
    assert overview.sections[2].content == "She has many friends."


def test_overview_theme_defaults_independently() -> None:
    overview = extract_overview([Section("Overview", "Enjoys math puzzles every morning.")])
    assert overview.at_a_glance == defaults.OVERVIEW_AT_A_GLANCE
    assert overview.sections[0].content == "Enjoys math puzzles every morning."
    assert overview.sections[1].content == defaults.THEMES[1].default
    assert overview.sections[2].content == defaults.THEMES[2].default


def test_overview_from_summary_section() -> None:
    overview = extract_overview([Section("Summary", "Brief summary text.")])
    assert overview.at_a_glance == "Brief summary text."
    assert overview.sections == defaults.default_thematic_sections()


def test_overview_default() -> None:
    assert extract_overview([Section("Misc", "x")]) == defaults.default_overview()


def test_strategies_from_labels() -> None:
    section = Section(
        "Key Support Strategies",
        "- **Use strengths:** Pair writing with science\n- **Don't underestimate:** Her leadership",
    )
    assert extract_strategies([section]) == (
        Strategy("Use Strengths", "Pair writing with science"),
        Strategy("Don't Underestimate", "Her leadership"),
    )


def test_strategies_from_top_level_bullets() -> None:
    section = Section(
        "Support Strategies",
        "- Provide a visual schedule for transitions\n- Short\n  - Nested detail that is long enough",
    )
    strategies = extract_strategies([section])
    assert len(strategies) == 1
    assert strategies[0].description == "Provide a visual schedule for transitions"
    assert strategies[0].name.endswith("...")
    assert len(strategies[0].name) == 33


def test_strategy_titles_are_preferred_over_support() -> None:
    sections = [
        Section("Key Findings", "- This bullet should not become a strategy"),
        Section("Support Strategies", "- Use visual timers during work"),
    ]
    assert [strategy.description for strategy in extract_strategies(sections)] == [
        "Use visual timers during work"
    ]


def test_strategies_default() -> None:
    assert extract_strategies([Section("Misc", "x")]) == defaults.default_strategies()
    assert len(defaults.default_strategies()) == 3


def test_strengths_from_item_blocks() -> None:
    section = Section(
        "Strengths",
        "**Reading**\nWhat You See:\n- Reads fluently\nWhat to Do:\n✔ Provide books",
    )
    strengths = extract_strengths([section])
    assert len(strengths) == 1
    strength = strengths[0]
    assert strength.title == "Reading"
    assert strength.observations == ("Reads fluently",)
    assert strength.actions == (ActionItem(ActionKind.DO, "Provide books"),)
    assert (strength.color, strength.bg_color) == defaults.STRENGTH_PALETTE[0]


def test_strength_colours_follow_ordinal() -> None:
    content = (
        "| Strength | What You See | What to Do |\n|---|---|---|\n"
        "| Reading | Reads fluently | ✔ Provide books |\n"
        "| Math | Solves puzzles quickly | ✔ Offer challenge problems |"
    )
    strengths = extract_strengths([Section("Section 1: Strengths", content)])
    assert [strength.color for strength in strengths] == [
        defaults.STRENGTH_PALETTE[0][0],
        defaults.STRENGTH_PALETTE[1][0],
    ]


def test_what_not_to_do_lines_are_dont_actions() -> None:
    content = (
        "### Math Facts\n**What You See:**\n- Counts on fingers for basic facts\n"
        "**What Not to Do:**\n- Timed drills in front of peers"
    )
    challenges = extract_challenges([Section("Challenges", content)])
    assert challenges[0].title == "Math Facts"
    assert challenges[0].actions == (ActionItem(ActionKind.DONT, "Timed drills in front of peers"),)


def test_descriptive_sentences_fill_missing_observations() -> None:
    content = (
        "### Organization\nHe frequently loses track of assignments and materials. Short one.\n"
        "**What to Do:**\n- Provide a daily checklist"
    )
    challenges = extract_challenges([Section("Areas of Need", content)])
    assert challenges[0].observations == ("He frequently loses track of assignments and materials",)
    assert challenges[0].actions == (ActionItem(ActionKind.DO, "Provide a daily checklist"),)


def test_unstructured_sections_fall_back_to_defaults() -> None:
    assert extract_strengths([Section("Strengths", "Just prose with no structure")]) == (
        defaults.default_strengths()
    )
    assert extract_challenges([Section("Overview", "x")]) == defaults.default_challenges()


def test_accommodations_section_is_not_challenges() -> None:
    content = (
        "| Accommodation | What You See | What to Do |\n|---|---|---|\n"
        "| Seating | Near the door | ✔ Seat near teacher |"
    )
    assert extract_challenges([Section("Section 3: Accommodations", content)]) == (
        defaults.default_challenges()
    )
