from types import SimpleNamespace

from bson.objectid import ObjectId
from pymongo.errors import ServerSelectionTimeoutError, WriteError

from core_registration import create_app
from core_registration.extensions import db as db_mod
from core_registration.extensions.db import ClientPromise


MEMBER = {
	"name": "Ada Lovelace",
	"phoneNumber": "9876543210",
	"email": "ada@example.com",
	"regNo": "22BCE0001",
	"gender": "Female",
	"birthdate": "2004-12-10",
	"quirkyDetail": "Names every houseplant after a compiler.",
}


class DummyColl:
	def __init__(self, docs=None, insert_error=None):
		self.docs = list(docs or [])
		self._insert_error = insert_error

	def find_one(self, query):
		# very small subset of pymongo-style matching used in tests
		key, val = next(iter(query.items()))
		for d in self.docs:
			if d.get(key) == val:
				return d
		return None

	def insert_one(self, doc):
		if self._insert_error is not None:
			raise self._insert_error
		doc["_id"] = ObjectId()
		self.docs.append(doc)
		return SimpleNamespace(inserted_id=doc["_id"])


def use_collection(monkeypatch, coll):
	import core_registration.api.routes as routes_mod

	async def fake_get_collection(name):
		assert name == "members"
		return coll

	monkeypatch.setattr(routes_mod, "get_collection", fake_get_collection)


def test_health_does_not_touch_database(monkeypatch):
	import core_registration.api.routes as routes_mod

	async def boom(name):
		raise AssertionError("health check must not use the database")

	monkeypatch.setattr(routes_mod, "get_collection", boom)
	resp = create_app().test_client().get("/api/health")
	assert resp.status_code == 200
	assert resp.get_json() == {"status": "ok"}


def test_create_member_inserts_document(monkeypatch):
	coll = DummyColl()
	use_collection(monkeypatch, coll)

	resp = create_app().test_client().post("/api/members", json=MEMBER)

	assert resp.status_code == 201
	data = resp.get_json()
	assert len(coll.docs) == 1
	stored = coll.docs[0]
	assert data["id"] == str(stored["_id"])
	assert {k: stored[k] for k in MEMBER} == MEMBER
	assert "created_at" in stored
	assert data["member"]["regNo"] == "22BCE0001"
	assert isinstance(data["member"]["created_at"], str)


def test_create_member_strips_whitespace(monkeypatch):
	coll = DummyColl()
	use_collection(monkeypatch, coll)

	payload = dict(MEMBER, name="  Ada Lovelace  ", regNo=" 22BCE0001\n")
	resp = create_app().test_client().post("/api/members", json=payload)

	assert resp.status_code == 201
	assert coll.docs[0]["name"] == "Ada Lovelace"
	assert coll.docs[0]["regNo"] == "22BCE0001"


def test_create_member_rejects_missing_fields(monkeypatch):
	coll = DummyColl()
	use_collection(monkeypatch, coll)
	client = create_app().test_client()

	payload = dict(MEMBER, name="   ")
	payload.pop("email")
	resp = client.post("/api/members", json=payload)
	assert resp.status_code == 400
	assert resp.get_json() == {"error": "name, email are required"}

	resp = client.post("/api/members", json=dict(MEMBER, regNo=""))
	assert resp.status_code == 400
	assert resp.get_json() == {"error": "regNo is required"}

	assert coll.docs == []


def test_create_member_rejects_non_object_payload(monkeypatch):
	use_collection(monkeypatch, DummyColl())
	client = create_app().test_client()

	resp = client.post("/api/members", data="not json", content_type="application/json")
	assert resp.status_code == 400
	assert resp.get_json() == {"error": "Invalid payload"}

	resp = client.post("/api/members", json=[MEMBER])
	assert resp.status_code == 400


def test_create_member_rejects_unknown_gender(monkeypatch):
	coll = DummyColl()
	use_collection(monkeypatch, coll)

	resp = create_app().test_client().post("/api/members", json=dict(MEMBER, gender="Robot"))

	assert resp.status_code == 400
	assert resp.get_json() == {"error": "gender must be one of Male, Female, Other"}
	assert coll.docs == []


def test_duplicate_registration_number_is_rejected(monkeypatch):
	existing = dict(MEMBER, name="Someone Else", _id=ObjectId())
	coll = DummyColl([existing])
	use_collection(monkeypatch, coll)

	resp = create_app().test_client().post("/api/members", json=MEMBER)

	assert resp.status_code == 409
	assert resp.get_json() == {"error": "Duplicate registration number"}
	assert coll.docs == [existing]


def test_unreachable_database_returns_500(monkeypatch):
	import core_registration.api.routes as routes_mod

	async def unreachable(name):
		raise ConnectionError("Failed to connect to MongoDB: no servers")

	monkeypatch.setattr(routes_mod, "get_collection", unreachable)

	resp = create_app().test_client().post("/api/members", json=MEMBER)

	assert resp.status_code == 500
	assert resp.get_json() == {"error": "Failed to save member details"}


def test_write_failure_returns_500(monkeypatch):
	use_collection(monkeypatch, DummyColl(insert_error=WriteError("boom")))

	resp = create_app().test_client().post("/api/members", json=MEMBER)

	assert resp.status_code == 500
	assert resp.get_json() == {"error": "Failed to save member details"}


class FakeMongo:
	"""Just enough of MongoClient for the members route via get_db()."""

	def __init__(self, uri, error=None, **kwargs):
		self.calls = []
		self.members = DummyColl()
		self.admin = SimpleNamespace(command=self._ping)
		self._error = error

	def _ping(self, name):
		if self._error is not None:
			raise self._error
		return {"ok": 1}

	def __getitem__(self, db_name):
		self.calls.append(db_name)
		return SimpleNamespace(get_collection=lambda name: self.members)


def test_requests_share_the_process_wide_client(monkeypatch):
	created = []

	def factory(uri, **kwargs):
		created.append(FakeMongo(uri, **kwargs))
		return created[-1]

	monkeypatch.setattr(db_mod, "client_promise", ClientPromise("mongodb://db.test", client_factory=factory))
	client = create_app().test_client()

	first = client.post("/api/members", json=MEMBER)
	second = client.post("/api/members", json=dict(MEMBER, regNo="22BCE0002"))

	assert first.status_code == 201
	assert second.status_code == 201
	assert len(created) == 1
	assert [d["regNo"] for d in created[0].members.docs] == ["22BCE0001", "22BCE0002"]
	assert created[0].calls == [db_mod.MONGODB_DB, db_mod.MONGODB_DB]


def test_failed_connection_is_reported_on_every_request(monkeypatch):
	created = []

	def factory(uri, **kwargs):
		created.append(FakeMongo(uri, error=ServerSelectionTimeoutError("no servers"), **kwargs))
		return created[-1]

	monkeypatch.setattr(db_mod, "client_promise", ClientPromise("mongodb://db.test", client_factory=factory))
	client = create_app().test_client()

	for _ in range(2):
		resp = client.post("/api/members", json=MEMBER)
		assert resp.status_code == 500
		assert resp.get_json() == {"error": "Failed to save member details"}
	assert len(created) == 1
