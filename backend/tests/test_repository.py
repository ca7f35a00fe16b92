import pytest
from sqlalchemy.exc import IntegrityError

from database.repository import (
    JobPostingRepository,
    MatchRepository,
    SeekerRepository,
    to_job_skills,
    to_seeker_skills,
)
from fakes import DATA_ANALYST, PYTHON, SQL, FakeTaxonomyClient
from models.schemas.matching import MatchResult, ScoreBreakdown, SkillSource
from models.schemas.profile import ParsedCv, ProfileSkill


def _create_seeker(db, name="Jane", email="jane@example.com"):
    parsed = ParsedCv(job_titles=["Barista"], education=["BSc"])
    skills = [
        ProfileSkill(uri=PYTHON, title="Python", proficiency=4),
        ProfileSkill(uri=SQL, title="SQL", skill_type="knowledge", source=SkillSource.INFERRED),
    ]
    with db.session_scope() as session:
        return SeekerRepository(session).create(name, email, "cv text", parsed, skills).id


def _create_posting(db, email="hr@acme.test", company="Acme"):
    occupation = FakeTaxonomyClient().get_occupation_details(DATA_ANALYST)
    with db.session_scope() as session:
        repo = JobPostingRepository(session)
        recruiter = repo.get_or_create_recruiter(email, company)
        return repo.create(recruiter, occupation, description="Join us").id


class TestSeekerRepository:
    def test_create_and_get(self, db):
        profile_id = _create_seeker(db)
        with db.session_scope() as session:
            profile = SeekerRepository(session).get(profile_id)
            assert profile.user.name == "Jane"
            assert profile.user.role == "SEEKER"
            assert profile.job_titles == ["Barista"]
            skills = to_seeker_skills(profile)

        by_uri = {s.uri: s for s in skills}
        assert by_uri[PYTHON].proficiency == 4
        assert by_uri[SQL].source == SkillSource.INFERRED

    def test_anonymous_seeker(self, db):
        profile_id = _create_seeker(db, name=None, email=None)
        with db.session_scope() as session:
            user = SeekerRepository(session).get(profile_id).user
            assert user.name == "Anonymous Seeker"
            assert user.email.endswith("@talentbridge.local")

    def test_get_missing(self, db):
        with db.session_scope() as session:
            assert SeekerRepository(session).get("nope") is None

    def test_list_all(self, db):
        _create_seeker(db, email="a@example.com")
        _create_seeker(db, email="b@example.com")
        with db.session_scope() as session:
            assert len(SeekerRepository(session).list_all()) == 2


class TestJobPostingRepository:
    def test_create_posting_with_skills(self, db):
        posting_id = _create_posting(db)
        with db.session_scope() as session:
            posting = JobPostingRepository(session).get(posting_id)
            assert posting.title == "data analyst"
            assert posting.recruiter_profile.company == "Acme"
            job_skills = to_job_skills(posting)

        assert sum(1 for s in job_skills if s.is_essential) == 3
        assert sum(1 for s in job_skills if not s.is_essential) == 1

    def test_recruiter_reused_by_email(self, db):
        first = _create_posting(db)
        second = _create_posting(db)
        with db.session_scope() as session:
            repo = JobPostingRepository(session)
            assert repo.get(first).recruiter_profile_id == repo.get(second).recruiter_profile_id
            assert len(repo.list_all()) == 2


class TestMatchRepository:
    def _result(self, score):
        return MatchResult(
            match_score=score,
            seeker_relevance=50,
            matched_skills=[PYTHON],
            missing_skills=[SQL],
            score_breakdown=ScoreBreakdown(essential_exact=1, max_possible=2),
        )

    def test_create_and_get_existing(self, db):
        seeker_id = _create_seeker(db)
        posting_id = _create_posting(db)
        with db.session_scope() as session:
            MatchRepository(session).create(seeker_id, posting_id, self._result(40))

        with db.session_scope() as session:
            match = MatchRepository(session).get_existing(seeker_id, posting_id)
            assert match.match_score == 40
            assert match.matched_skills == [PYTHON]
            assert match.score_breakdown["max_possible"] == 2

    def test_one_match_per_pair(self, db):
        seeker_id = _create_seeker(db)
        posting_id = _create_posting(db)
        with db.session_scope() as session:
            MatchRepository(session).create(seeker_id, posting_id, self._result(40))

        with pytest.raises(IntegrityError):
            with db.session_scope() as session:
                MatchRepository(session).create(seeker_id, posting_id, self._result(60))

    def test_list_all_filters_and_orders(self, db):
        first = _create_seeker(db, email="a@example.com")
        second = _create_seeker(db, email="b@example.com")
        posting_id = _create_posting(db)
        with db.session_scope() as session:
            repo = MatchRepository(session)
            repo.create(first, posting_id, self._result(30))
            repo.create(second, posting_id, self._result(70))

        with db.session_scope() as session:
            repo = MatchRepository(session)
            assert [m.match_score for m in repo.list_all(job_posting_id=posting_id)] == [70, 30]
            assert [m.seeker_profile_id for m in repo.list_all(seeker_profile_id=first)] == [first]
