import pytest

from pseudoidp.exception import SessionNotFound
from pseudoidp.session import RequestInput
from pseudoidp.session import Session
from pseudoidp.session import SessionStore

AUTH_REQ = RequestInput(
    domain="idp.example.com",
    url_params={
        "client_id": ["client_1"],
        "redirect_uri": ["https://rp.example.com/cb"],
        "nonce": ["n1"],
        "code_challenge": ["E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"],
        "code_challenge_method": ["S256"],
        "state": ["s"],
    },
)


class TestSessionStore(object):
    @pytest.fixture(autouse=True)
    def create_store(self):
        self.store = SessionStore()

    def test_no_code(self):
        self.store.create(AUTH_REQ, {"state": ["s"], "id_token": ["x.y.z"]})
        assert len(self.store) == 0
        with pytest.raises(SessionNotFound):
            self.store.lookup("x.y.z")
        with pytest.raises(SessionNotFound):
            self.store.lookup("")

    def test_empty_code(self):
        self.store.create(AUTH_REQ, {"code": []})
        assert len(self.store) == 0

    def test_create_lookup(self):
        self.store.create(AUTH_REQ, {"code": ["abc"], "state": ["s"]})
        assert "abc" in self.store
        session = self.store.lookup("abc")
        assert session.created_at > 0
        assert session.dump(exclude_attributes=["created_at"]) == {
            "code": "abc",
            "client_id": "client_1",
            "nonce": "n1",
            "code_challenge": "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
            "code_challenge_method": "S256",
            "redirect_uri": "https://rp.example.com/cb",
        }

    def test_resolved_redirect_uri_wins(self):
        self.store.create(
            AUTH_REQ, {"code": ["abc"], "redirect_uri": ["https://attacker.example.com/cb"]}
        )
        assert self.store.lookup("abc").redirect_uri == "https://attacker.example.com/cb"

    def test_missing_request_values(self):
        self.store.create(RequestInput(), {"code": ["abc"]})
        session = self.store.lookup("abc")
        assert session.client_id == ""
        assert session.redirect_uri == ""

    def test_not_found_is_key_error(self):
        with pytest.raises(KeyError):
            self.store.lookup("nope")


def test_session_dump_load():
    session = Session(code="abc", client_id="client_1", nonce="n1", created_at=1700000000)
    _dump = session.dump()
    assert _dump["created_at"] == 1700000000
    assert _dump["redirect_uri"] == ""

    _new = Session().load(_dump)
    assert _new.client_id == "client_1"
    assert _new.created_at == 1700000000
    assert _new.dump() == _dump
