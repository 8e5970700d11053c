"""Fixed stand-in profiles used when live sourcing is unavailable."""
from __future__ import annotations

import uuid

from hirescout.sources.base import ProfileSearchProvider
from hirescout.types import EducationItem, ExperienceItem, RawProfile

MOCK_NAMESPACE = uuid.UUID("5f1b7a8e-2c4d-4e0f-9a61-3b2d8c7e4f10")


def _mock_id(role: str, name: str) -> str:
    return str(uuid.uuid5(MOCK_NAMESPACE, f"{role.lower()}|{name.lower()}"))


def mock_profiles(role: str, skills: list[str]) -> list[RawProfile]:
    return [
        RawProfile(
            id=_mock_id(role, "Alex Chen"),
            full_name="Alex Chen",
            email="alex.chen@example.com",
            headline=f"Senior {role}",
            location="Sydney, Australia",
            linkedin_url="https://linkedin.com/in/alex-chen",
            skills=[*skills[:3], "Git", "Agile"],
            experience=[
                ExperienceItem(
                    position=f"Senior {role}",
                    company_name="Tech Startup Inc",
                    duration="2 yrs",
                    description="Leading development team",
                ),
                ExperienceItem(
                    position=role,
                    company_name="Digital Agency",
                    duration="1 yr",
                    description="Building web applications",
                ),
            ],
            education=[
                EducationItem(
                    school_name="University of Sydney",
                    degree="Bachelor of Computer Science",
                    field_of_study="Software Engineering",
                )
            ],
            github_username="alex-dev",
        ),
        RawProfile(
            id=_mock_id(role, "Jordan Smith"),
            full_name="Jordan Smith",
            email="jordan.smith@example.com",
            headline=f"{role} Specialist",
            location="Melbourne, Australia",
            linkedin_url="https://linkedin.com/in/jordan-smith",
            skills=[*skills[1:4], "Docker", "CI/CD"],
            experience=[
                ExperienceItem(
                    position=f"{role} Specialist",
                    company_name="Enterprise Corp",
                    duration="3 yrs",
                    description="Specialized development work",
                )
            ],
            education=[
                EducationItem(
                    school_name="RMIT University",
                    degree="Bachelor of IT",
                    field_of_study="Computer Science",
                )
            ],
            github_username="j-smith",
        ),
        RawProfile(
            id=_mock_id(role, "Taylor Lee"),
            full_name="Taylor Lee",
            email="taylor.lee@example.com",
            headline=f"Lead {role}",
            location="Brisbane, Australia",
            linkedin_url="https://linkedin.com/in/taylor-lee",
            skills=list(skills),
            experience=[
                ExperienceItem(
                    position=f"Lead {role}",
                    company_name="Innovation Labs",
                    duration="4 yrs",
                    description="Leading engineering teams",
                ),
                ExperienceItem(
                    position=f"Senior {role}",
                    company_name="Software House",
                    duration="2 yrs",
                    description="Full stack development",
                ),
            ],
            education=[
                EducationItem(
                    school_name="Queensland University",
                    degree="Master of Software Engineering",
                    field_of_study="Computer Science",
                )
            ],
            github_username="taylor-codes",
        ),
    ]


class MockProfileSource(ProfileSearchProvider):
    name = "mock"

    def search(self, *, role: str, skills: list[str], location: str, limit: int) -> list[RawProfile]:
        return mock_profiles(role, skills)[:limit]
