"""JobService: search, lookup, recommendations."""

import pytest

from skillscout.errors import NotFoundError
from skillscout.matcher import MatchScorer
from skillscout.models import Location, Salary, SalaryRange
from skillscout.profiles import InMemoryProfileProvider
from skillscout.service import JobService


@pytest.fixture
def seeded_store(store, clock, make_posting):
    store.upsert(make_posting(
        url="https://x/mumbai-react", title="React Developer", skills={"react", "javascript"},
        location=Location(city="Mumbai", state="Maharashtra"), salary=Salary(min=900000, max=1200000),
    ))
    clock.advance(minutes=1)
    store.upsert(make_posting(
        url="https://x/remote-react", title="Frontend Engineer", skills={"react"},
        location=Location(city="Hyderabad", state="Telangana", remote=True),
    ))
    clock.advance(minutes=1)
    store.upsert(make_posting(
        url="https://x/pune-react", title="React Developer", skills={"react"},
        location=Location(city="Pune", state="Maharashtra"),
    ))
    clock.advance(minutes=1)
    store.upsert(make_posting(
        url="https://x/mumbai-python", title="Python Developer", skills={"python"},
        location=Location(city="Mumbai", state="Maharashtra"),
    ))
    clock.advance(minutes=1)
    store.upsert(make_posting(
        url="https://x/mumbai-lowpay", title="React Intern", skills={"react"},
        location=Location(city="Mumbai", state="Maharashtra"), salary=Salary(min=100000, max=200000),
    ))
    return store


def _service(store, *users):
    return JobService(store, InMemoryProfileProvider(users), MatchScorer())


def _urls(page):
    return [posting.source.url for posting, _ in page.items]


class TestRecommend:
    def test_candidates_share_a_skill_and_fit_location(self, seeded_store, make_user):
        service = _service(seeded_store, make_user(skills=["react", "javascript"]))

        page = service.recommend("u1")

        assert set(_urls(page)) == {
            "https://x/mumbai-react",
            "https://x/remote-react",
            "https://x/mumbai-lowpay",
        }
        assert _urls(page)[0] == "https://x/mumbai-react"

    def test_salary_preference_excludes_underpaying_postings(self, seeded_store, make_user):
        user = make_user(skills=["react"], salary_range=SalaryRange(min=500000, max=1500000))
        page = _service(seeded_store, user).recommend("u1")
        assert "https://x/mumbai-lowpay" not in _urls(page)
        assert "https://x/remote-react" in _urls(page)

    def test_job_history_is_excluded(self, seeded_store, make_user):
        user = make_user(skills=["react"], job_history=["https://x/mumbai-react"])
        assert "https://x/mumbai-react" not in _urls(_service(seeded_store, user).recommend("u1"))

    def test_items_carry_match_results_in_rank_order(self, seeded_store, make_user):
        page = _service(seeded_store, make_user(skills=["react"])).recommend("u1")
        overall = [match.overall for _, match in page.items]
        assert overall == sorted(overall, reverse=True)

    def test_pagination(self, seeded_store, make_user):
        service = _service(seeded_store, make_user(skills=["react"]))
        first = service.recommend("u1", page=1, limit=2)
        second = service.recommend("u1", page=2, limit=2)

        assert first.total == second.total == 3
        assert len(first.items) == 2 and len(second.items) == 1
        assert not set(_urls(first)) & set(_urls(second))

    def test_user_without_skills_gets_recent_postings(self, seeded_store, make_user):
        page = _service(seeded_store, make_user(skills=())).recommend("u1", limit=2)
        assert _urls(page) == ["https://x/mumbai-lowpay", "https://x/mumbai-python"]
        assert page.total == 5

    def test_unknown_user(self, seeded_store):
        with pytest.raises(NotFoundError):
            _service(seeded_store).recommend("ghost")


class TestLookups:
    def test_search_and_get(self, seeded_store, make_user):
        service = _service(seeded_store, make_user())
        page = service.search({"keywords": "python"})
        assert page.total == 1
        assert service.get(page.items[0].id).title == "Python Developer"

    def test_match(self, seeded_store, make_user):
        service = _service(seeded_store, make_user(skills=["python"]))
        posting_id = service.search({"keywords": "python"}).items[0].id
        result = service.match("u1", posting_id)
        assert result.skills == 100
        assert result.location == 100

    def test_get_unknown_posting(self, seeded_store):
        with pytest.raises(NotFoundError):
            _service(seeded_store).get("missing")
