from datetime import timedelta

from models import SkillCategory
from services.aggregation import (
    compute_dashboard_stats,
    compute_skill_matrix,
    round_half_away,
)


class TestDashboardStats:
    def test_empty_input_has_zero_average(self):
        stats = compute_dashboard_stats([], [], [], [], [])

        assert stats.total_users == 0
        assert stats.total_skills == 0
        assert stats.total_certifications == 0
        assert stats.total_trainings == 0
        assert stats.average_skill_level == 0
        assert stats.skills_by_category == []

    def test_counts_every_collection(
        self,
        make_employee,
        make_skill,
        make_user_skill,
        make_certification,
        make_training,
        today,
    ):
        ada = make_employee()
        bob = make_employee("Bob Stone")
        python = make_skill()
        cert = make_certification(ada.id, today + timedelta(days=100))
        training = make_training(bob.id)

        stats = compute_dashboard_stats(
            [ada, bob],
            [python],
            [make_user_skill(ada.id, python.id, level=4)],
            [cert],
            [training],
        )

        assert stats.total_users == 2
        assert stats.total_skills == 1
        assert stats.total_certifications == 1
        assert stats.total_trainings == 1
        assert stats.average_skill_level == 4.0

    def test_average_of_whole_levels(self, make_employee, make_skill, make_user_skill):
        ada = make_employee()
        skills = [make_skill(f"Skill {i}") for i in range(3)]
        user_skills = [
            make_user_skill(ada.id, skill.id, level=level)
            for skill, level in zip(skills, [5, 4, 3])
        ]

        stats = compute_dashboard_stats([ada], skills, user_skills, [], [])

        assert stats.average_skill_level == 4.0

    def test_average_rounds_to_two_places(
        self, make_employee, make_skill, make_user_skill
    ):
        ada = make_employee()
        skills = [make_skill(f"Skill {i}") for i in range(3)]
        user_skills = [
            make_user_skill(ada.id, skill.id, level=level)
            for skill, level in zip(skills, [5, 4, 4])
        ]

        stats = compute_dashboard_stats([ada], skills, user_skills, [], [])

        assert stats.average_skill_level == 4.33

    def test_out_of_range_levels_are_averaged(
        self, make_employee, make_skill, make_user_skill
    ):
        ada = make_employee()
        first, second = make_skill("A"), make_skill("B")

        stats = compute_dashboard_stats(
            [ada],
            [first, second],
            [
                make_user_skill(ada.id, first.id, level=-1),
                make_user_skill(ada.id, second.id, level=5),
            ],
            [],
            [],
        )

        assert stats.average_skill_level == 2.0

    def test_skills_grouped_by_present_categories_only(self, make_skill):
        skills = [
            make_skill("React", SkillCategory.FRONTEND),
            make_skill("Postgres", SkillCategory.DATABASE),
            make_skill("Vue", SkillCategory.FRONTEND),
        ]

        stats = compute_dashboard_stats([], skills, [], [], [])

        counts = {c.category: c.count for c in stats.skills_by_category}
        assert counts == {SkillCategory.FRONTEND: 2, SkillCategory.DATABASE: 1}

    def test_category_order_is_stable(self, make_skill):
        skills = [
            make_skill("Terraform", SkillCategory.DEVOPS),
            make_skill("React", SkillCategory.FRONTEND),
            make_skill("Ansible", SkillCategory.DEVOPS),
        ]

        first = compute_dashboard_stats([], skills, [], [], [])
        second = compute_dashboard_stats([], skills, [], [], [])

        assert first.skills_by_category == second.skills_by_category


def test_round_half_away_from_zero():
    assert round_half_away(4.335) in (4.33, 4.34)
    assert round_half_away(0.125) == 0.13
    assert round_half_away(13 / 3) == 4.33


class TestSkillMatrix:
    def test_outer_join_covers_every_pair(
        self, make_employee, make_skill, make_user_skill
    ):
        users = [make_employee("Ada Lovelace"), make_employee("Bob Stone")]
        skills = [make_skill("Go"), make_skill("Python"), make_skill("Rust")]
        assessment = make_user_skill(
            users[0].id, skills[1].id, level=5, notes="Daily driver"
        )

        matrix = compute_skill_matrix(users, skills, [assessment])

        cells = [cell for row in matrix for cell in row.skills]
        assert len(cells) == 6
        assert sum(1 for c in cells if c.proficiency_level == 0) == 5

        assessed = matrix[0].skills[1]
        assert assessed.proficiency_level == 5
        assert assessed.notes == "Daily driver"
        assert assessed.last_updated == assessment.last_updated

    def test_unassessed_cells_are_empty(self, make_employee, make_skill):
        matrix = compute_skill_matrix([make_employee()], [make_skill()], [])

        cell = matrix[0].skills[0]
        assert cell.proficiency_level == 0
        assert cell.notes is None
        assert cell.last_updated is None

    def test_preserves_input_order(self, make_employee, make_skill):
        users = [make_employee("Zed Zulu"), make_employee("Amy Adams")]
        skills = [make_skill("Swift"), make_skill("Ansible")]

        matrix = compute_skill_matrix(users, skills, [])

        assert [row.user.name for row in matrix] == ["Zed Zulu", "Amy Adams"]
        assert [c.skill_name for c in matrix[0].skills] == ["Swift", "Ansible"]

    def test_no_users_yields_empty_matrix(self, make_skill):
        assert compute_skill_matrix([], [make_skill()], []) == []
