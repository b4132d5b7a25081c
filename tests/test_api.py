# tests/test_api.py
from datetime import datetime, timedelta, timezone

from app import activity
from app.activity import activity_logger
from app.auction import reconcile
from app.models import Property, PropertyInterest, UserActivity
from app.utils import utcnow

PASSWORD = "secret123"


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


# properties

def test_listing_reconciles_and_hides_expired_by_default(client, make_property):
    now = utcnow()
    make_property(title="future", auction_date=now + timedelta(days=3))
    make_property(title="live", auction_date=now + timedelta(hours=1), auction_status="active")
    make_property(title="missed", auction_date=now - timedelta(minutes=5))
    make_property(title="done", auction_date=now - timedelta(days=3), auction_status="active")

    body = client.get("/api/properties").json()

    statuses = {p["title"]: p["auction_status"] for p in body["properties"]}
    assert statuses == {"future": "upcoming", "live": "active"}
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 2, "pages": 1}


def test_listing_status_filters(client, make_property):
    now = utcnow()
    make_property(title="a", auction_date=now + timedelta(days=1))
    make_property(title="b", auction_date=now - timedelta(days=1), auction_status="expired")
    make_property(title="c", auction_date=now - timedelta(days=9), auction_status="sold")

    all_titles = {p["title"] for p in client.get("/api/properties?status=").json()["properties"]}
    assert all_titles == {"a", "b", "c"}
    expired = client.get("/api/properties", params={"status": "expired"}).json()["properties"]
    assert [p["title"] for p in expired] == ["b"]
    assert client.get("/api/properties?status=bogus").status_code == 400


def test_listing_filters_sort_and_soft_delete(client, make_property):
    make_property(title="cheap", city="Pune", reserve_price=100)
    make_property(title="pricey", city="Pune", reserve_price=900)
    make_property(title="elsewhere", city="Delhi", reserve_price=500)
    make_property(title="gone", city="Pune", reserve_price=300, is_active=False)

    res = client.get("/api/properties", params={"city": "pun", "sort_by": "reserve_price_desc"}).json()
    assert [p["title"] for p in res["properties"]] == ["pricey", "cheap"]
    res = client.get("/api/properties", params={"min_price": 200, "max_price": 600}).json()
    assert [p["title"] for p in res["properties"]] == ["elsewhere"]
    assert client.get("/api/properties?sort_by=title").status_code == 400


def test_get_property_counts_view_and_logs(client, db, make_property):
    prop = make_property()
    res = client.get(f"/api/properties/{prop.id}")
    assert res.status_code == 200
    assert res.json()["property"]["views_count"] == 1
    activity_logger.drain()
    rows = activity.get_activities_by_action(db, "property_viewed")
    assert [r.data for r in rows] == [{"property_id": prop.id}]
    assert client.get("/api/properties/9999").status_code == 404


def test_logging_failure_does_not_affect_response(client, make_property, monkeypatch):
    prop = make_property()

    def broken(*args, **kwargs):
        raise RuntimeError("activity table unavailable")

    monkeypatch.setattr(activity, "record_activity", broken)
    res = client.get(f"/api/properties/{prop.id}")
    activity_logger.drain()
    assert res.status_code == 200
    assert res.json()["property"]["id"] == prop.id


def test_property_admin_lifecycle(client, db, make_user, auth_headers):
    admin = make_user(role="admin")
    headers = auth_headers(admin)
    payload = {
        "title": "Villa",
        "address": "1 Beach Rd",
        "city": "Goa",
        "reserve_price": 12500000,
        "auction_date": (utcnow() + timedelta(days=30)).isoformat(),
    }
    res = client.post("/api/properties", json=payload, headers=headers)
    assert res.status_code == 201
    created = res.json()["property"]
    assert created["auction_status"] == "upcoming"
    assert created["created_by"] == admin.id

    pid = created["id"]
    assert client.put(f"/api/properties/{pid}", json={}, headers=headers).status_code == 400
    res = client.put(f"/api/properties/{pid}", json={"auction_status": "sold"}, headers=headers)
    assert res.json()["property"]["auction_status"] == "sold"

    assert client.delete(f"/api/properties/{pid}", headers=headers).status_code == 200
    assert client.get(f"/api/properties/{pid}").status_code == 404
    assert db.get(Property, pid).is_active is False


def test_offset_auction_date_is_stored_as_utc(client, db, make_user, auth_headers):
    starts = datetime(2027, 1, 10, 4, 30, tzinfo=timezone.utc)
    payload = {
        "title": "Sea View Flat", "address": "7 Marine Drive", "city": "Mumbai",
        "reserve_price": 9000000, "auction_date": "2027-01-10T10:00:00+05:30",
    }
    res = client.post("/api/properties", json=payload, headers=auth_headers(make_user(role="admin")))
    assert res.status_code == 201
    prop = db.get(Property, res.json()["property"]["id"])
    assert prop.auction_date.replace(tzinfo=timezone.utc) == starts

    assert reconcile(db, now=starts - timedelta(seconds=1)) == 0
    assert reconcile(db, now=starts) == 1
    db.refresh(prop)
    assert prop.auction_status == "active"


def test_property_writes_require_staff(client, make_user, auth_headers, make_property):
    prop = make_property()
    assert client.delete(f"/api/properties/{prop.id}").status_code == 401
    user = make_user()
    assert client.delete(f"/api/properties/{prop.id}", headers=auth_headers(user)).status_code == 403
    staff = make_user(role="staff")
    assert client.delete(f"/api/properties/{prop.id}", headers=auth_headers(staff)).status_code == 200


# interests and enquiries

def test_track_interest_updates_counters(client, db, make_property):
    prop = make_property()
    for kind in ("view", "share", "contact", "save", "share"):
        res = client.post("/api/interests", json={"property_id": prop.id, "interest_type": kind})
        assert res.status_code == 200
    db.refresh(prop)
    assert (prop.views_count, prop.shares_count, prop.enquiries_count) == (1, 2, 1)
    assert db.query(PropertyInterest).count() == 5


def test_track_interest_validation(client, make_property):
    prop = make_property()
    assert client.post("/api/interests", json={"property_id": prop.id, "interest_type": "like"}).status_code == 422
    assert client.post("/api/interests", json={"property_id": 4242, "interest_type": "view"}).status_code == 404


def test_interest_stats_for_staff(client, make_property, make_user, auth_headers):
    prop = make_property()
    for kind in ("view", "view", "save"):
        client.post("/api/interests", json={"property_id": prop.id, "interest_type": kind})
    staff = make_user(role="staff")
    res = client.get(f"/api/interests/stats/{prop.id}", headers=auth_headers(staff))
    assert res.json()["stats"] == {"views": 2, "shares": 0, "contacts": 0, "saves": 1}
    assert client.get(f"/api/interests/stats/{prop.id}", headers=auth_headers(make_user())).status_code == 403


def test_enquiry_flow(client, db, make_property, make_user, auth_headers):
    prop = make_property(title="Plot 7")
    buyer = make_user()
    enquiry = {
        "property_id": prop.id, "name": "Asha", "email": "Asha@DreamBid.in",
        "phone": "9999999999", "message": "Site visit?",
    }
    res = client.post("/api/enquiries", json=enquiry, headers=auth_headers(buyer))
    assert res.status_code == 201
    created = res.json()["enquiry"]
    assert created["user_id"] == buyer.id
    assert created["email"] == "asha@dreambid.in"
    db.refresh(prop)
    assert prop.enquiries_count == 1

    admin_headers = auth_headers(make_user(role="admin"))
    listing = client.get("/api/enquiries", headers=admin_headers).json()
    assert listing["pagination"]["total"] == 1
    assert listing["enquiries"][0]["property_title"] == "Plot 7"

    res = client.put(f"/api/enquiries/{created['id']}/status", json={"status": "contacted"}, headers=admin_headers)
    assert res.json()["enquiry"]["status"] == "contacted"
    assert client.get("/api/enquiries?status=new", headers=admin_headers).json()["pagination"]["total"] == 0


# auth and activity

def test_register_login_me(client, db):
    res = client.post("/api/auth/register", json={
        "email": "new@dreambid.in", "password": PASSWORD, "full_name": "New User",
    })
    assert res.status_code == 201
    assert client.post("/api/auth/register", json={
        "email": "new@dreambid.in", "password": PASSWORD, "full_name": "Again",
    }).status_code == 409

    assert client.post("/api/auth/login", json={"email": "new@dreambid.in", "password": "wrong"}).status_code == 401
    res = client.post("/api/auth/login", json={"email": "new@dreambid.in", "password": PASSWORD})
    assert res.status_code == 200
    token = res.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["user"]
    assert me["email"] == "new@dreambid.in"
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"}).status_code == 401

    activity_logger.drain()
    actions = {r.action for r in db.query(UserActivity)}
    assert {"user_registered", "login_failed", "user_login"} <= actions


def test_inactive_user_cannot_login(client, make_user):
    user = make_user(is_active=False)
    res = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert res.status_code == 403


def test_password_changes_share_one_category(client, db, make_user, auth_headers):
    user = make_user()
    res = client.post("/api/auth/change-password", headers=auth_headers(user), json={
        "current_password": PASSWORD, "new_password": "secret456",
    })
    assert res.status_code == 200
    res = client.post("/api/user/change-password", headers=auth_headers(user), json={
        "current_password": "secret456", "new_password": "secret789", "confirm_password": "secret789",
    })
    assert res.status_code == 200

    activity_logger.drain()
    rows = activity.get_activities_by_action(db, "password_changed")
    assert len(rows) == 2
    assert {r.action_category for r in rows} == {"authentication"}


def test_save_activity_and_access_rules(client, make_user, auth_headers):
    user, other, admin = make_user(), make_user(), make_user(role="admin")
    res = client.post(
        "/api/activity/save",
        json={"action": "search", "action_category": "browse", "data": {"q": "goa"}},
        headers=auth_headers(user),
    )
    assert res.status_code == 201
    assert res.json()["activity"]["data"] == {"q": "goa"}
    assert client.post("/api/activity/save", json={"action": "  "}, headers=auth_headers(user)).status_code == 422

    own = client.get(f"/api/activity/user/{user.id}", headers=auth_headers(user)).json()
    assert own["pagination"]["total"] == 1
    assert client.get(f"/api/activity/user/{user.id}", headers=auth_headers(other)).status_code == 403
    assert client.get(f"/api/activity/user/{user.id}", headers=auth_headers(admin)).status_code == 200

    stats = client.get(f"/api/activity/stats/user/{user.id}", headers=auth_headers(user)).json()
    assert [(s["action"], s["count"]) for s in stats["stats"]] == [("search", 1)]

    assert client.get("/api/activity/all", headers=auth_headers(user)).status_code == 403
    overall = client.get("/api/activity/stats", headers=auth_headers(admin)).json()
    assert {"action_category": "browse", "count": 1, "unique_users": 1} in overall["stats"]


def test_admin_manual_cleanup(client, db, make_user, auth_headers):
    admin = make_user(role="admin")
    now = utcnow()
    db.add(UserActivity(action="old", created_at=now - timedelta(days=40)))
    db.add(UserActivity(action="new", created_at=now - timedelta(days=2)))
    db.commit()
    headers = auth_headers(admin)

    preview = client.get("/api/activity/cleanup/stats?days_old=30", headers=headers).json()
    assert preview["total_records"] == 1
    res = client.post("/api/activity/cleanup?days_old=30", headers=headers)
    assert res.json()["records_deleted"] == 1
    assert [r.action for r in db.query(UserActivity)] == ["new"]
