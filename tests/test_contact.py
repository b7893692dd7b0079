from sqlmodel import Session, select

from models.contact_message import ContactMessage

VALID_FORM = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "subject": "Project enquiry",
    "message": "<p>Hello</p><script>alert(1)</script>",
}


def test_contact_message_is_stored_and_mailed(client, engine, mailer):
    response = client.post("/api/contact", json=VALID_FORM)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Message sent successfully"
    assert body["limit"] == 5
    assert body["remaining"] == 4
    assert response.headers["X-RateLimit-Remaining"] == "4"

    with Session(engine) as session:
        stored = session.exec(select(ContactMessage)).one()
    assert stored.email == "ada@example.com"
    assert "<p>Hello</p>" in stored.message
    assert "<script>" not in stored.message

    assert mailer.sent == [("contact", "ada@example.com", "Project enquiry")]


def test_missing_field_is_rejected(client, engine):
    form = dict(VALID_FORM, subject="  ")

    response = client.post("/api/contact", json=form)

    assert response.status_code == 400
    assert response.json() == {"error": "All fields are required"}
    with Session(engine) as session:
        assert session.exec(select(ContactMessage)).all() == []


def test_invalid_email_is_rejected(client):
    response = client.post("/api/contact", json=dict(VALID_FORM, email="not-an-email"))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email format"}


def test_subject_line_breaks_are_removed(client, engine):
    client.post("/api/contact", json=dict(VALID_FORM, subject="Hi\r\nBcc: x@y.z"))

    with Session(engine) as session:
        stored = session.exec(select(ContactMessage)).one()
    assert stored.subject == "HiBcc: x@y.z"


def test_contact_is_rate_limited_per_ip(client):
    headers = {"x-forwarded-for": "203.0.113.7"}
    for _ in range(5):
        assert client.post("/api/contact", json=VALID_FORM, headers=headers).status_code == 201

    response = client.post("/api/contact", json=VALID_FORM, headers=headers)

    assert response.status_code == 429
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in response.headers

    other = client.post(
        "/api/contact", json=VALID_FORM, headers={"x-forwarded-for": "198.51.100.2"}
    )
    assert other.status_code == 201


def test_contact_without_mailer_still_succeeds(make_app, engine):
    from fastapi.testclient import TestClient

    app = make_app()
    app.state.mailer = None

    response = TestClient(app).post("/api/contact", json=VALID_FORM)

    assert response.status_code == 201


def test_name_is_text_escaped_before_storage(client, engine):
    client.post("/api/contact", json=dict(VALID_FORM, name='  Ada <b>"Countess"</b> '))

    with Session(engine) as session:
        stored = session.exec(select(ContactMessage)).one()
    assert stored.name == "Ada &lt;b&gt;&quot;Countess&quot;&lt;/b&gt;"
