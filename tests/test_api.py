from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import get_policy_config
from ancestortree.main import app
from ancestortree.models.event import Event
from ancestortree.models.family import Family
from ancestortree.models.media import Media
from ancestortree.models.person import Person

from tests.conftest import MEMBER_USER_ID, auth_header


def _seed(db):
    ancestor = Person(handle="cu-to", display_name="Cu To", generation=1, is_living=False,
                      privacy_level=0, biography="Founder", notes="Grave at the old village")
    public_living = Person(handle="an", display_name="An", generation=5, is_living=True,
                           privacy_level=0, phone="0900000000")
    members = Person(handle="binh", display_name="Binh", generation=5, is_living=True,
                     privacy_level=1, email="binh@example.com", user_id=MEMBER_USER_ID)
    private = Person(handle="chi", display_name="Chi", generation=6, is_living=True, privacy_level=2)
    db.add_all([ancestor, public_living, members, private])
    db.flush()

    family = Family(father_id=ancestor.id)
    gio = Event(title="Gio Cu To", event_lunar="10/03", person_id=ancestor.id)
    private_event = Event(title="Private", person_id=private.id)
    db.add_all([family, gio, private_event])
    db.flush()

    db.add_all([
        Media(file_path="/media/grave.jpg", file_type="image", event_id=gio.id),
        Media(file_path="/media/chi.jpg", file_type="image", person_id=private.id),
    ])
    db.commit()
    return {p.handle: p.id for p in (ancestor, public_living, members, private)}


def test_health(client):
    assert client.get("/").json() == {"message": "AncestorTree API is running!"}


def test_anonymous_people_list_is_public_and_stripped(client, db):
    _seed(db)

    people = client.get("/people").json()

    assert [p["handle"] for p in people] == ["cu-to"]
    assert "biography" not in people[0]
    assert "notes" not in people[0]
    assert "phone" not in people[0]


def test_member_people_list_excludes_private(client, db, member_headers):
    _seed(db)

    people = client.get("/people", headers=member_headers).json()

    assert {p["handle"] for p in people} == {"cu-to", "an", "binh"}
    binh = next(p for p in people if p["handle"] == "binh")
    assert binh["email"] == "binh@example.com"


def test_admin_people_list_has_everyone(client, db, admin_headers):
    _seed(db)

    people = client.get("/people", headers=admin_headers).json()

    assert {p["handle"] for p in people} == {"cu-to", "an", "binh", "chi"}


def test_people_filters(client, db, admin_headers):
    _seed(db)

    living = client.get("/people", params={"status": "living"}, headers=admin_headers).json()
    gen_six = client.get("/people", params={"generation": 6}, headers=admin_headers).json()
    search = client.get("/people", params={"search": "bin"}, headers=admin_headers).json()

    assert {p["handle"] for p in living} == {"an", "binh", "chi"}
    assert [p["handle"] for p in gen_six] == ["chi"]
    assert [p["handle"] for p in search] == ["binh"]


def test_denied_person_is_not_found(client, db, member_headers):
    ids = _seed(db)

    assert client.get(f"/people/{ids['chi']}", headers=member_headers).status_code == 404
    assert client.get(f"/people/{ids['an']}").status_code == 404
    assert client.get("/people/does-not-exist").status_code == 404


def test_bad_token_reads_as_anonymous(client, db):
    ids = _seed(db)

    headers = {"Authorization": "Bearer not-a-token"}
    assert client.get(f"/people/{ids['binh']}", headers=headers).status_code == 404
    assert client.get(f"/people/{ids['cu-to']}", headers=headers).status_code == 200


def test_create_person_defaults_to_members_tier(client, member_headers):
    resp = client.post("/people", json={"handle": "dung", "display_name": "Dung"}, headers=member_headers)

    assert resp.status_code == 201
    assert resp.json()["privacy_level"] == 1


def test_create_public_living_person_with_contact_is_tightened(client, admin_headers):
    resp = client.post(
        "/people",
        json={"handle": "em", "display_name": "Em", "privacy_level": 0, "phone": "0911111111"},
        headers=admin_headers,
    )

    assert resp.status_code == 201
    assert resp.json()["privacy_level"] == 1


def test_create_requires_sign_in(client):
    resp = client.post("/people", json={"handle": "dung", "display_name": "Dung"})
    assert resp.status_code == 401


def test_create_rejects_duplicate_handle(client, db, member_headers):
    _seed(db)
    resp = client.post("/people", json={"handle": "an", "display_name": "An"}, headers=member_headers)
    assert resp.status_code == 400


def test_adding_phone_to_public_living_person_raises_tier(client, admin_headers):
    created = client.post(
        "/people",
        json={"handle": "giang", "display_name": "Giang", "privacy_level": 0},
        headers=admin_headers,
    ).json()
    assert created["privacy_level"] == 0
    assert client.get(f"/people/{created['id']}").status_code == 200

    updated = client.patch(f"/people/{created['id']}", json={"phone": "0922222222"}, headers=admin_headers)

    assert updated.status_code == 200
    assert updated.json()["privacy_level"] == 1
    assert client.get(f"/people/{created['id']}").status_code == 404

    swept = client.post("/admin/privacy/sweep", headers=admin_headers).json()
    assert swept["updated"] == 0
    assert client.get(f"/people/{created['id']}", headers=admin_headers).json()["privacy_level"] == 1


def test_member_can_edit_self_only(client, db, member_headers):
    ids = _seed(db)

    own = client.patch(f"/people/{ids['binh']}", json={"occupation": "Farmer"}, headers=member_headers)
    other = client.patch(f"/people/{ids['an']}", json={"occupation": "Farmer"}, headers=member_headers)
    hidden = client.patch(f"/people/{ids['chi']}", json={"occupation": "Farmer"}, headers=member_headers)

    assert own.status_code == 200
    assert own.json()["occupation"] == "Farmer"
    assert other.status_code == 403
    assert hidden.status_code == 404


def test_families_require_sign_in(client, db, member_headers):
    _seed(db)

    assert client.get("/families").json() == []
    assert len(client.get("/families", headers=member_headers).json()) == 1
    assert client.get("/children").json() == []


def test_events_follow_their_person(client, db, member_headers, admin_headers):
    _seed(db)

    anonymous = client.get("/events").json()
    member = client.get("/events", headers=member_headers).json()
    admin = client.get("/events", headers=admin_headers).json()

    assert [e["title"] for e in anonymous] == ["Gio Cu To"]
    assert [e["title"] for e in member] == ["Gio Cu To"]
    assert {e["title"] for e in admin} == {"Gio Cu To", "Private"}


def test_media_follow_event_and_person(client, db, member_headers, admin_headers):
    _seed(db)

    assert [m["file_path"] for m in client.get("/media", headers=member_headers).json()] == ["/media/grave.jpg"]
    assert len(client.get("/media", headers=admin_headers).json()) == 2


def test_profiles_are_hidden_from_anonymous(client, member_headers):
    assert client.get("/profiles").json() == []
    assert client.get("/profiles/me").status_code == 401

    me = client.get("/profiles/me", headers=member_headers).json()
    assert me["role"] == "member"
    assert len(client.get("/profiles", headers=member_headers).json()) == 2


def test_signed_in_user_without_profile_has_no_me(client):
    assert client.get("/profiles/me", headers=auth_header("no-profile-user")).status_code == 404


def test_admin_endpoints_are_admin_only(client, member_headers):
    assert client.post("/admin/privacy/sweep").status_code == 401
    assert client.post("/admin/privacy/sweep", headers=member_headers).status_code == 403
    assert client.get("/admin/privacy/audit", headers=member_headers).status_code == 403


def test_sweep_endpoint_tightens_legacy_rows(client, db, admin_headers):
    _seed(db)

    first = client.post("/admin/privacy/sweep", headers=admin_headers).json()
    second = client.post("/admin/privacy/sweep", headers=admin_headers).json()

    assert first == {"updated": 1, "policy_version": "2026-02-26"}
    assert second["updated"] == 0


def test_audit_endpoint_is_clean(client, db, admin_headers):
    _seed(db)

    report = client.get("/admin/privacy/audit", headers=admin_headers).json()

    assert report["violations"] == []
    # 4 people, 1 family, 2 events, 2 media, 2 profiles
    assert report["records_checked"] == 11


def test_field_filtering_policy_over_http(client, db):
    _seed(db)
    app.dependency_overrides[get_policy_engine] = lambda: PolicyEngine(get_policy_config("field-filtering"))

    people = client.get("/people").json()

    assert {p["handle"] for p in people} == {"cu-to", "an"}
    assert all("phone" not in p for p in people)


def test_member_can_edit_own_private_record(client, db, member_headers):
    own = Person(handle="tu-lam", display_name="Tu Lam", is_living=True, privacy_level=2,
                 user_id=MEMBER_USER_ID)
    db.add(own)
    db.commit()

    resp = client.patch(f"/people/{own.id}", json={"occupation": "Farmer"}, headers=member_headers)

    assert resp.status_code == 200
    db.refresh(own)
    assert own.occupation == "Farmer"
    assert own.privacy_level == 2


def test_clearing_required_fields_is_rejected(client, admin_headers):
    created = client.post("/people", json={"handle": "hoa", "display_name": "Hoa"}, headers=admin_headers).json()

    for body in ({"display_name": ""}, {"privacy_level": None}, {"generation": None}, {"is_living": None}):
        resp = client.patch(f"/people/{created['id']}", json=body, headers=admin_headers)
        assert resp.status_code == 422, body

    person = client.get(f"/people/{created['id']}", headers=admin_headers).json()
    assert person["display_name"] == "Hoa"
    assert person["privacy_level"] == 1


def test_optional_fields_can_still_be_cleared(client, admin_headers):
    created = client.post(
        "/people",
        json={"handle": "khanh", "display_name": "Khanh", "occupation": "Potter"},
        headers=admin_headers,
    ).json()

    resp = client.patch(f"/people/{created['id']}", json={"occupation": ""}, headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["occupation"] is None


def test_social_and_avatar_links_must_be_urls(client, admin_headers):
    bad = client.post(
        "/people",
        json={"handle": "lan", "display_name": "Lan", "facebook": "not a url"},
        headers=admin_headers,
    )
    assert bad.status_code == 422

    good = client.post(
        "/people",
        json={
            "handle": "lan",
            "display_name": "Lan",
            "facebook": "https://facebook.com/lan",
            "avatar_url": "https://cdn.example.com/lan.jpg",
        },
        headers=admin_headers,
    )
    assert good.status_code == 201
    assert good.json()["facebook"].startswith("https://facebook.com/lan")
    assert good.json()["avatar_url"] == "https://cdn.example.com/lan.jpg"
