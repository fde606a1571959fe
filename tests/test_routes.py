from newhope_portal.models import Announcement, Identity, PatientRecord
from newhope_portal.services.identities import IdentityStore
from newhope_portal.services.registry import PatientRegistry


def _counts(db_factory):
    with db_factory() as db:
        return (
            db.query(Identity).count(),
            db.query(PatientRecord).count(),
            db.query(Announcement).count(),
        )


class TestPublicPages:
    def test_pages_render_anonymously(self, client):
        for path in ("/", "/about", "/services", "/contact", "/login", "/register"):
            response = client.get(path)
            assert response.status_code == 200, path
            assert "text/html" in response.headers["content-type"]

    def test_home_lists_announcements(self, client, login):
        login(client)
        client.post("/admin/announcements", data={"title": "Flu shots", "content": "Available Monday"})
        client.post("/logout")
        response = client.get("/")
        assert "Flu shots" in response.text


class TestRegistration:
    def test_register_logs_in_and_creates_pending_record(self, client, register, db_factory):
        response = register(client)
        assert response.status_code == 302
        assert response.headers["location"] == "/patient/dashboard"

        dashboard = client.get("/patient/dashboard")
        assert dashboard.status_code == 200
        assert "Pending admission" in dashboard.text

        with db_factory() as db:
            identity = IdentityStore(db).find_by_email("ann@x.com")
            record = PatientRegistry(db).find_by_owner(identity.id)
            assert record.status == "Pending admission"
            assert record.phone == "555-0100"
            assert record.reason == "Chest pain"

    def test_duplicate_email_rejected(self, client, other_client, register, db_factory):
        register(client)
        before = _counts(db_factory)
        response = register(other_client, name="Ann Two")
        assert response.status_code == 400
        assert "already exists" in response.text
        assert _counts(db_factory) == before
        # no session was started for the rejected registration
        assert other_client.get("/patient/dashboard").status_code == 302

    def test_missing_fields_rejected(self, client, register, db_factory):
        before = _counts(db_factory)
        response = register(client, password="")
        assert response.status_code == 400
        assert "required" in response.text
        assert _counts(db_factory) == before

    def test_missing_form_keys_do_not_422(self, client, db_factory):
        response = client.post("/register", data={"email": "x@x.com"})
        assert response.status_code == 400


class TestLogin:
    def test_admin_login_lands_on_admin_dashboard(self, client, login):
        response = login(client)
        assert response.status_code == 302
        assert response.headers["location"] == "/admin/dashboard"
        assert client.get("/admin/dashboard").status_code == 200

    def test_wrong_password(self, client, login):
        response = login(client, password="wrong")
        assert response.status_code == 400
        assert "Invalid credentials." in response.text
        assert client.get("/admin/dashboard").status_code == 302

    def test_patient_login_lands_on_patient_dashboard(self, client, other_client, register, login):
        register(client)
        response = login(other_client, email="ann@x.com", password="pw")
        assert response.headers["location"] == "/patient/dashboard"

    def test_logout(self, client, login):
        login(client)
        cookie = client.cookies.get("session")
        response = client.post("/logout")
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert client.get("/admin/dashboard").status_code == 302
        # the old cookie no longer opens a session
        client.cookies.set("session", cookie)
        assert client.get("/admin/dashboard").status_code == 302


class TestGate:
    def test_anonymous_redirected_to_login(self, client):
        for path in ("/patient/dashboard", "/admin/dashboard"):
            response = client.get(path)
            assert response.status_code == 302
            assert response.headers["location"] == "/login"

    def test_anonymous_mutation_redirected(self, client, db_factory):
        before = _counts(db_factory)
        response = client.post("/admin/announcements", data={"title": "t", "content": "c"})
        assert response.status_code == 302
        assert response.headers["location"] == "/login"
        assert _counts(db_factory) == before

    def test_admin_cannot_open_patient_dashboard(self, client, login):
        login(client)
        assert client.get("/patient/dashboard").status_code == 403

    def test_patient_forbidden_on_admin_operations(self, client, other_client, register, login, db_factory):
        login(other_client)
        other_client.post("/admin/announcements", data={"title": "A", "content": "a"})
        register(client)
        with db_factory() as db:
            record = PatientRegistry(db).list_all()[0]
        before = _counts(db_factory)

        assert client.get("/admin/dashboard").status_code == 403
        assert client.post("/admin/announcements", data={"title": "t", "content": "c"}).status_code == 403
        assert client.post("/admin/announcements/1/delete").status_code == 403
        assert client.post(f"/admin/patients/{record.id}/status", data={"status": "Admitted"}).status_code == 403
        assert client.post(f"/admin/patients/{record.id}/delete").status_code == 403

        assert _counts(db_factory) == before
        with db_factory() as db:
            assert PatientRegistry(db).find(record.id).status == "Pending admission"

    def test_forbidden_renders_error_page_for_browsers(self, client, register):
        register(client)
        response = client.get("/admin/dashboard", headers={"accept": "text/html"})
        assert response.status_code == 403
        assert "Forbidden" in response.text

    def test_tampered_cookie_is_anonymous(self, client):
        client.cookies.set("session", "not-a-jwt")
        assert client.get("/patient/dashboard").status_code == 302

    def test_deleted_patient_session_ends(self, client, other_client, register, login, db_factory):
        register(client)
        login(other_client)
        with db_factory() as db:
            record = PatientRegistry(db).list_all()[0]
        other_client.post(f"/admin/patients/{record.id}/delete")
        response = client.get("/patient/dashboard")
        assert response.status_code == 302
        assert response.headers["location"] == "/login"


class TestAdminOperations:
    def test_status_change_visible_to_patient(self, client, other_client, register, login):
        register(client)
        login(other_client)
        response = other_client.post("/admin/patients/1/status", data={"status": "Admitted"})
        assert response.status_code == 302
        assert response.headers["location"] == "/admin/dashboard"
        assert "Admitted" in client.get("/patient/dashboard").text

    def test_status_on_unknown_or_bad_id_is_noop(self, client, other_client, register, login, db_factory):
        register(client)
        login(other_client)
        before = _counts(db_factory)
        for path in ("/admin/patients/999/status", "/admin/patients/abc/status"):
            response = other_client.post(path, data={"status": "Admitted"})
            assert response.status_code == 302
        response = other_client.post("/admin/patients/1/status", data={"status": ""})
        assert response.status_code == 302
        assert _counts(db_factory) == before
        with db_factory() as db:
            assert PatientRegistry(db).find(1).status == "Pending admission"

    def test_delete_patient_cascades(self, client, other_client, register, login, db_factory):
        register(client)
        login(other_client)
        response = other_client.post("/admin/patients/1/delete")
        assert response.status_code == 302
        with db_factory() as db:
            assert PatientRegistry(db).find(1) is None
            assert IdentityStore(db).find_by_email("ann@x.com") is None
        # the email is free again
        assert register(client).status_code == 302

    def test_delete_unknown_patient_is_noop(self, client, other_client, register, login, db_factory):
        register(client)
        login(other_client)
        before = _counts(db_factory)
        assert other_client.post("/admin/patients/999/delete").status_code == 302
        assert other_client.post("/admin/patients/xyz/delete").status_code == 302
        assert _counts(db_factory) == before

    def test_announcements_ordering_and_removal(self, client, login, db_factory):
        login(client)
        client.post("/admin/announcements", data={"title": "A", "content": "first"})
        client.post("/admin/announcements", data={"title": "B", "content": "second"})
        with db_factory() as db:
            rows = db.query(Announcement).order_by(Announcement.id.desc()).all()
            assert [a.title for a in rows] == ["B", "A"]
            a_id = rows[1].id
        page = client.get("/admin/dashboard").text
        assert page.index(">B<") < page.index(">A<")

        assert client.post(f"/admin/announcements/{a_id}/delete").status_code == 302
        assert client.post(f"/admin/announcements/{a_id}/delete").status_code == 302
        assert client.post("/admin/announcements/nope/delete").status_code == 302
        assert _counts(db_factory)[2] == 1

    def test_incomplete_announcement_dropped(self, client, login, db_factory):
        login(client)
        response = client.post("/admin/announcements", data={"title": "Only title"})
        assert response.status_code == 302
        assert _counts(db_factory)[2] == 0
