import os
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from services.esco_client import EscoApiError, EscoClient

BASE = "https://esco.test/api"


def _response(status_code=200, payload=None, reason="OK"):
    res = MagicMock()
    res.status_code = status_code
    res.ok = status_code < 400
    res.reason = reason
    res.json.return_value = payload or {}
    return res


def _client(*responses, max_attempts=3):
    client = EscoClient(base_url=BASE, max_attempts=max_attempts, backoff_seconds=0)
    session = MagicMock()
    session.get.side_effect = list(responses)
    client._session = session
    return client, session


OCCUPATION_PAYLOAD = {
    "uri": "http://data.europa.eu/esco/occupation/data-analyst",
    "title": "data analyst",
    "code": "2511.3",
    "description": {"en": {"literal": "Data analysts import, inspect and model data."}},
    "preferredLabel": {"en": "data analyst"},
    "alternativeLabel": {"en": ["data analytics specialist"]},
    "_links": {
        "hasEssentialSkill": [
            {
                "uri": "http://data.europa.eu/esco/skill/sql",
                "title": "SQL",
                "skillType": "http://data.europa.eu/esco/skill-type/knowledge",
            }
        ],
        "hasOptionalSkill": [
            {"uri": "http://data.europa.eu/esco/skill/viz", "title": "data visualisation"},
            {"title": "no uri, dropped"},
        ],
    },
}


class TestSearch:
    def test_search_skills(self):
        client, session = _client(_response(payload={
            "_embedded": {"results": [
                {"uri": "u1", "title": "Python (computer programming)"},
                {"title": "missing uri"},
            ]}
        }))
        results = client.search_skills("python")
        assert [r.uri for r in results] == ["u1"]
        assert results[0].title == "Python (computer programming)"

        url = session.get.call_args.args[0]
        params = session.get.call_args.kwargs["params"]
        assert url == f"{BASE}/search"
        assert params["type"] == "skill"
        assert params["text"] == "python"
        assert params["language"] == "en"

    def test_search_occupations_empty(self):
        client, session = _client(_response(payload={}))
        assert client.search_occupations("astronaut") == []
        assert session.get.call_args.kwargs["params"]["type"] == "occupation"


class TestResources:
    def test_occupation_details(self):
        client, _ = _client(_response(payload=OCCUPATION_PAYLOAD))
        occ = client.get_occupation_details(OCCUPATION_PAYLOAD["uri"])
        assert occ.title == "data analyst"
        assert occ.code == "2511.3"
        assert occ.description == "Data analysts import, inspect and model data."
        assert occ.alternative_labels == ["data analytics specialist"]
        assert [s.title for s in occ.essential_skills] == ["SQL"]
        assert occ.essential_skills[0].skill_type == "knowledge"
        assert [s.uri for s in occ.optional_skills] == ["http://data.europa.eu/esco/skill/viz"]
        assert occ.optional_skills[0].skill_type is None

    def test_skill_occupations(self):
        client, _ = _client(_response(payload={"_links": {
            "isEssentialForOccupation": [{"uri": "o1"}, {"uri": "o2"}],
            "isOptionalForOccupation": [{"uri": "o2"}, {"uri": "o3"}],
        }}))
        assert client.get_skill_occupations("s1") == {"o1", "o2", "o3"}

    def test_skill_without_links(self):
        client, _ = _client(_response(payload={"uri": "s1"}))
        assert client.get_skill_occupations("s1") == set()


class TestRetry:
    def test_retries_server_errors(self):
        client, session = _client(
            _response(503, reason="Service Unavailable"),
            _response(502, reason="Bad Gateway"),
            _response(payload={"_embedded": {"results": [{"uri": "u1", "title": "x"}]}}),
        )
        assert [r.uri for r in client.search_skills("x")] == ["u1"]
        assert session.get.call_count == 3

    def test_retries_connection_errors(self):
        client, session = _client(
            requests.ConnectionError("reset"),
            _response(payload={}),
        )
        assert client.search_skills("x") == []
        assert session.get.call_count == 2

    def test_gives_up_after_max_attempts(self):
        client, session = _client(*[_response(500, reason="Server Error")] * 3)
        with pytest.raises(EscoApiError) as exc_info:
            client.search_skills("x")
        assert exc_info.value.status_code == 500
        assert session.get.call_count == 3

    def test_client_errors_not_retried(self):
        client, session = _client(_response(404, reason="Not Found"), _response(payload={}))
        with pytest.raises(EscoApiError) as exc_info:
            client.get_occupation_details("missing")
        assert exc_info.value.status_code == 404
        assert session.get.call_count == 1


class TestSession:
    def test_lazy_session_and_close(self):
        client = EscoClient(base_url=BASE)
        assert client._session is None
        session = client.session
        assert session is client.session
        client.close()
        assert client._session is None

    def test_concurrent_first_use_builds_one_session(self):
        created = []

        def slow_session():
            time.sleep(0.02)
            session = MagicMock()
            created.append(session)
            return session

        client = EscoClient(base_url=BASE)
        with patch("services.esco_client.requests.Session", side_effect=slow_session):
            with ThreadPoolExecutor(max_workers=8) as pool:
                sessions = list(pool.map(lambda _: client.session, range(8)))

        assert len(created) == 1
        assert all(s is created[0] for s in sessions)
        client.close()
        created[0].close.assert_called_once()


@pytest.mark.integration
@pytest.mark.skipif(not os.environ.get("ESCO_LIVE_TESTS"), reason="set ESCO_LIVE_TESTS=1 to hit the live API")
def test_live_occupation_search():
    client = EscoClient()
    try:
        results = client.search_occupations("data analyst")
        assert results
        occupation = client.get_occupation_details(results[0].uri)
        assert occupation.essential_skills
    finally:
        client.close()
